from __future__ import annotations

from typing import Union

import numpy as np

from shared.models import ChannelViewState


def to_active_axis(
    y: Union[float, np.ndarray],
    channel: ChannelViewState,
    active: ChannelViewState,
) -> Union[float, np.ndarray]:
    """
    Express a value of `channel` on the vertical axis of `active`.

    The channel's deviation from its own centre, in units of its own zoom, is
    re-expressed in the active channel's units. Both channels keep their own
    zoom/pos; only the drawn coordinates change.
    """
    if channel is active:
        return y
    return (y - channel.pos) / channel.zoom * active.zoom + active.pos


__all__ = ["to_active_axis"]
