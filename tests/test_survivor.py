from models import Record, SourcePriority
from survivor import DEFAULT_SOURCE_ORDER, DUPLICATE_REASON, resolve_duplicate

_PRIORITY = SourcePriority(order=DEFAULT_SOURCE_ORDER)


def _record(local_id: str, source: str, title: str = "Paper", doi: str | None = None) -> Record:
    return Record(
        local_id=local_id,
        subject="s",
        title=title,
        title_key=title.lower(),
        identifier=doi,
        source=source,
        fields={"title": title, "doi": doi, "source": source},
    )


def test_better_ranked_source_survives() -> None:
    author = _record("r1", "author", title="Self-asserted copy")
    wos = _record("r2", "Web of Science Researcher Profile Sync", title="Indexed copy", doi="10.1/abc")

    kept, removed, entry = resolve_duplicate(author, wos, _PRIORITY)

    assert kept is wos
    assert removed is author
    assert entry.removed is author
    assert entry.kept_title == "Indexed copy"
    assert entry.kept_identifier == "10.1/abc"
    assert entry.reason == DUPLICATE_REASON


def test_tie_keeps_first_encountered() -> None:
    first = _record("r1", "Other")
    second = _record("r2", "Other")

    kept, removed, _ = resolve_duplicate(first, second, _PRIORITY)

    assert kept is first
    assert removed is second


def test_unknown_source_ranks_last() -> None:
    unknown = _record("r1", "Some Repository")
    author = _record("r2", "author")

    kept, _, _ = resolve_duplicate(unknown, author, _PRIORITY)

    assert kept is author
    assert _PRIORITY.rank("Some Repository") > _PRIORITY.rank("author")


def test_resolution_is_deterministic() -> None:
    first = _record("r1", "Scopus - Elsevier")
    second = _record("r2", "Other")

    outcomes = {
        (kept.local_id, removed.local_id)
        for kept, removed, _ in (resolve_duplicate(first, second, _PRIORITY) for _ in range(20))
    }

    assert outcomes == {("r1", "r2")}


def test_injected_priority_order_changes_survivor() -> None:
    first = _record("r1", "Scopus - Elsevier")
    second = _record("r2", "author")
    author_first = SourcePriority(order=("author", "Scopus - Elsevier"))

    kept, _, _ = resolve_duplicate(first, second, author_first)

    assert kept is second


def test_protected_pair_requires_both_sources() -> None:
    priority = SourcePriority(order=("Scopus",), protected=frozenset({"Scopus"}))

    assert priority.is_protected_pair(_record("r1", "Scopus"), _record("r2", "Scopus"))
    assert not priority.is_protected_pair(_record("r1", "Scopus"), _record("r2", "author"))
