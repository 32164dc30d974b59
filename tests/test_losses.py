from eu4history.config import LOSSES_CATEGORIES, LOSSES_MAX
from eu4history.losses import add_losses, create_losses, decode_loss


def test_decode_loss() -> None:
    assert decode_loss(0) == 0
    assert decode_loss(1234) == 1234
    assert decode_loss(-1) == 2 * LOSSES_MAX - 1
    assert decode_loss(-LOSSES_MAX) == LOSSES_MAX
    assert decode_loss(-LOSSES_MAX - 1) == LOSSES_MAX + 1


def test_create_losses_is_fixed_width() -> None:
    assert len(LOSSES_CATEGORIES) == 21
    assert create_losses(()) == [0] * 21

    losses = create_losses([5, -1] + [1] * 30)
    assert len(losses) == 21
    assert losses[:2] == [5, 2 * LOSSES_MAX - 1]
    assert losses[-1] == 1


def test_add_losses() -> None:
    total = create_losses([1, 2])
    add_losses(total, create_losses([10, 20, 30]))
    assert total[:4] == [11, 22, 30, 0]
    assert len(total) == len(LOSSES_CATEGORIES)
