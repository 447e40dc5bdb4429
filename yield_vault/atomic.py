"""All-or-nothing vault actions.

A vault action touches its own state, its position store, the asset ledger
and external collaborators. If anything fails halfway, everything is put back
the way it was and the error propagates to the caller.
"""

import copy
import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def atomic(*participants):
    """Roll back the participants if the block raises.

    - Snapshots the instance ``__dict__`` of each participant on entry
    - Participants are restored in place, so outside references to them stay valid
    - References between participants are kept as references, not copied

    .. code-block:: python

        with atomic(self, self.assets, self.pool):
            self._do_swap()

    :param participants:
        Objects with instance state
    """
    memo = {id(p): p for p in participants}
    saved = [copy.deepcopy(p.__dict__, memo) for p in participants]
    try:
        yield
    except Exception as e:
        logger.info("Rolling back %d participants after %s: %s", len(participants), e.__class__.__name__, e)
        for participant, state in zip(participants, saved):
            participant.__dict__.clear()
            participant.__dict__.update(state)
        raise
