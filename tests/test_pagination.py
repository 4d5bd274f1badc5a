import pytest

from navsite.services.pagination import PageHistory


def test_first_page_has_no_token_and_no_back() -> None:
    history = PageHistory()

    assert history.current is None
    assert history.can_go_back is False
    assert history.can_go_forward is False
    with pytest.raises(IndexError):
        history.back()
    with pytest.raises(IndexError):
        history.advance()


def test_forward_and_back_reissue_recorded_tokens() -> None:
    history = PageHistory()
    history.record(has_more=True, next_token="t1")

    assert history.advance() == "t1"
    history.record(has_more=True, next_token="t2")
    assert history.advance() == "t2"
    history.record(has_more=False, next_token=None)

    assert history.can_go_forward is False
    assert history.back() == "t1"
    assert history.back() is None
    assert history.index == 0


def test_advancing_after_going_back_discards_forward_history() -> None:
    history = PageHistory()
    history.record(has_more=True, next_token="t1")
    history.advance()
    history.record(has_more=True, next_token="t2")
    history.advance()
    history.back()

    history.record(has_more=True, next_token="t2-fresh")
    assert history.advance() == "t2-fresh"
    assert history.index == 2

    history.back()
    history.back()
    assert history.current is None


def test_has_more_without_token_cannot_advance() -> None:
    history = PageHistory()
    history.record(has_more=True, next_token=None)
    assert history.can_go_forward is False


def test_reset_returns_to_first_page() -> None:
    history = PageHistory()
    history.record(has_more=True, next_token="t1")
    history.advance()

    history.reset()

    assert history.current is None
    assert history.index == 0
    assert history.can_go_forward is False
