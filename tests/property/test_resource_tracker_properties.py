"""
Property-based tests for the mark-and-sweep resource tracker.

Properties covered:
*For any* sequence of marks, a key's first-seen time never moves later and
never lies in the future.
*For any* run, completion keeps exactly the marked keys, and every swept key
was marked during that run.
*For a* zero TTL, every managed resource is swept on first sight.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from hypothesis import given, settings
from hypothesis import strategies as st

from resource_janitor.models import TagPolicy
from resource_janitor.services import ResourceTracker

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
POLICY = TagPolicy()

# =============================================================================
# Strategies for generating test data
# =============================================================================

key_strategy = st.sampled_from([f"resource-{i}" for i in range(8)])

# Creation times from well before NOW to a little after it
created_strategy = st.one_of(
    st.none(),
    st.integers(min_value=-72 * 3600, max_value=3600).map(lambda s: NOW + timedelta(seconds=s)),
)

ttl_strategy = st.integers(min_value=0, max_value=48 * 3600).map(lambda s: timedelta(seconds=s))

table_strategy = st.dictionaries(
    key_strategy,
    st.integers(min_value=-72 * 3600, max_value=0).map(lambda s: NOW + timedelta(seconds=s)),
    max_size=8,
)


def new_tracker(ttl, table=None):
    return ResourceTracker(ttl, first_seen=table, clock=lambda: NOW, reporter=MagicMock())


# =============================================================================
# Properties
# =============================================================================

@given(
    table=table_strategy,
    marks=st.lists(st.tuples(key_strategy, created_strategy), max_size=20),
    ttl=ttl_strategy,
)
@settings(max_examples=100)
def test_first_seen_is_monotonic_and_not_future(table, marks, ttl):
    tracker = new_tracker(ttl, table)

    for key, created in marks:
        before = tracker.first_seen.get(key)
        tracker.mark(POLICY, key, created, [])
        after = tracker.first_seen[key]

        assert after <= NOW
        if before is not None:
            assert after <= before


@given(
    table=table_strategy,
    marked=st.sets(key_strategy),
    ttl=ttl_strategy,
)
@settings(max_examples=100)
def test_complete_keeps_exactly_marked_keys(table, marked, ttl):
    tracker = new_tracker(ttl, table)
    for key in marked:
        tracker.mark(POLICY, key, None, [])

    report = tracker.complete()

    assert set(tracker.get_arns()) == marked
    assert set(report.forgotten) == set(table) - marked
    assert set(report.swept) <= marked
    assert report.tracked == len(marked)


@given(keys=st.sets(key_strategy, min_size=1), created=created_strategy)
@settings(max_examples=50)
def test_zero_ttl_sweeps_every_managed_resource(keys, created):
    tracker = new_tracker(timedelta(0))

    advised = [tracker.mark(POLICY, key, created, []) for key in keys]

    assert all(advised)
    assert sorted(tracker.swept) == sorted(keys)


@given(table=table_strategy, ttl=ttl_strategy)
@settings(max_examples=100)
def test_sweep_decision_matches_age(table, ttl):
    tracker = new_tracker(ttl, table)

    for key, seen in table.items():
        expected = ttl == timedelta(0) or NOW - seen > ttl
        assert tracker.mark(POLICY, key, None, []) == expected
