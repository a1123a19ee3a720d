from datetime import date, datetime, timedelta, timezone

from rss_generator.templating import as_datetime, get_environment


def test_get_environment_registers_rfc822_filter():
    env = get_environment()
    assert "rfc822" in env.filters
    rendered = env.from_string("{{ value | rfc822 }}").render(
        value=datetime(2024, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=9)))
    )
    assert rendered == "Tue, 02 Jan 2024 03:00:00 GMT"


def test_as_datetime_promotes_dates_to_utc_midnight():
    assert as_datetime(date(2023, 12, 1)) == datetime(2023, 12, 1, tzinfo=timezone.utc)
    assert as_datetime(datetime(2023, 12, 1, 8)).tzinfo == timezone.utc
