"""Sticker Ledger — tests for capacity arithmetic."""

from arena.core.sticker_ledger import StickerCapacity, has_capacity


def test_has_capacity_below_limit():
    assert has_capacity(2, 3)


def test_no_capacity_at_limit():
    assert not has_capacity(3, 3)


def test_zero_limit_never_has_capacity():
    assert not has_capacity(0, 0)


def test_unlimited_always_has_capacity():
    assert has_capacity(10_000, None)


def test_remaining_counts_down():
    cap = StickerCapacity(used=1, limit=3)
    assert cap.remaining == 2
    assert not cap.exhausted


def test_remaining_never_negative():
    # Limit lowered by an admin below current usage
    cap = StickerCapacity(used=5, limit=3)
    assert cap.remaining == 0
    assert cap.exhausted


def test_unlimited_has_no_remaining_count():
    cap = StickerCapacity(used=7, limit=None)
    assert cap.remaining is None
    assert not cap.exhausted
