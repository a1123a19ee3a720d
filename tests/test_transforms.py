from datetime import date, datetime, timedelta, timezone

from rss_generator import transforms


def test_extract_likes_reads_number_after_plus():
    assert transforms.extract_likes("いいね +290") == 290
    assert transforms.extract_likes(":like: +7 LGTM") == 7


def test_extract_likes_defaults_to_zero():
    assert transforms.extract_likes("") == 0
    assert transforms.extract_likes(None) == 0
    assert transforms.extract_likes("no number") == 0


def test_parse_qiita_date_returns_calendar_date():
    assert transforms.parse_qiita_date("2023年12月01日") == date(2023, 12, 1)


def test_parse_qiita_date_finds_pattern_inside_text():
    assert transforms.parse_qiita_date("投稿日 2024年1月5日 更新") == date(2024, 1, 5)


def test_parse_qiita_date_uses_clock_when_missing(clock):
    assert transforms.parse_qiita_date("", clock) == clock()
    assert transforms.parse_qiita_date("yesterday", clock) == clock()
    assert transforms.parse_qiita_date("2023年13月40日", clock) == clock()


def test_parse_qiita_date_default_clock_is_now():
    result = transforms.parse_qiita_date("")

    assert isinstance(result, datetime)
    assert abs(datetime.now(timezone.utc) - result) < timedelta(seconds=5)


def test_create_description_passes_title_through():
    assert transforms.create_description("A title") == "A title"
    assert transforms.create_description("") == ""
    assert transforms.create_description(None) == ""


def test_apply_transform_dispatches_by_name(clock):
    assert transforms.apply_transform("+3", "extractLikes", clock) == 3
    assert transforms.apply_transform("2023年12月01日", "parseQiitaDate", clock) == date(
        2023, 12, 1
    )


def test_apply_transform_unknown_name_is_identity():
    value = ["a", "b"]
    assert transforms.apply_transform(value, "doesNotExist") is value
