"""
Hypothesis Strategies

Custom strategies for generating test data for property-based testing.
"""

from datetime import datetime, timedelta, timezone

from hypothesis import strategies as st

from tempdrop.domain.file_storage.value_objects import ExpirationOption

# Timezone-aware instants within a range that avoids datetime overflow
aware_datetimes = st.datetimes(
    min_value=datetime(2000, 1, 1),
    max_value=datetime(2100, 1, 1),
    timezones=st.just(timezone.utc),
)

allowed_minutes = st.sampled_from([option.value for option in ExpirationOption])

disallowed_minutes = st.integers(min_value=-100_000, max_value=100_000).filter(
    lambda m: m not in {option.value for option in ExpirationOption}
)

positive_offsets = st.timedeltas(
    min_value=timedelta(microseconds=1), max_value=timedelta(days=365)
)

remaining_offsets = st.timedeltas(
    min_value=timedelta(days=-30), max_value=timedelta(days=30)
)

# Fixed UTC offsets as used in ISO-8601 timestamps
fixed_offsets = st.integers(min_value=-14 * 60, max_value=14 * 60).map(
    lambda minutes: timezone(timedelta(minutes=minutes))
)
