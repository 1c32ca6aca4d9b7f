import pytest

from doc_scout.tokens import TokenAccountant, estimate_tokens, would_exceed


def test_estimate_empty_text_is_zero():
    assert estimate_tokens("") == 0


def test_estimate_blends_chars_and_words():
    # 11 chars / 4 = 2.75, 2 words / 0.75 = 2.67 -> ceil(2.71) = 3
    assert estimate_tokens("hello world") == 3


def test_estimate_is_monotonic_in_length():
    text = "lorem ipsum dolor sit amet "
    counts = [estimate_tokens(text * n) for n in range(1, 30)]
    assert counts == sorted(counts)
    assert all(c > 0 for c in counts)


@pytest.mark.parametrize(
    "spent,to_add,ceiling,expected",
    [(0, 10, 10, False), (5, 6, 10, True), (10, 0, 10, False), (0, 11, 10, True)],
)
def test_would_exceed(spent, to_add, ceiling, expected):
    assert would_exceed(spent, to_add, ceiling) is expected


def test_accountant_commits_until_ceiling():
    acc = TokenAccountant(100)
    assert acc.try_commit("a", 60)
    assert not acc.try_commit("b", 41)
    assert acc.try_commit("c", 40)
    assert acc.spent == 100
    assert acc.per_page == {"a": 60, "c": 40}
    assert acc.remaining == 0
    assert acc.fraction_spent() == 1.0


def test_accountant_rejects_bad_values():
    with pytest.raises(ValueError):
        TokenAccountant(0)
    acc = TokenAccountant(10)
    with pytest.raises(ValueError):
        acc.record(-1)
