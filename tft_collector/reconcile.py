# reconcile.py
# Delete players that ended up without any match link.

import logging
from typing import Optional

from .errors import InvalidArgument
from .store import Store

log = logging.getLogger(__name__)


class OrphanReconciler:
    """Run only after every match of the run has been linked.

    With an empty link table every player is an orphan; unless allow_empty is
    set that is treated as "links not written yet" and refused.
    """

    def __init__(self, store: Store, allow_empty: bool = False,
                 logger: Optional[logging.Logger] = None):
        self.store = store
        self.allow_empty = allow_empty
        self.log = logger or log

    def reconcile(self) -> int:
        if not self.allow_empty and self.store.link_count() == 0 and self.store.player_count() > 0:
            raise InvalidArgument("no player-match links stored; refusing to delete every player")
        deleted = self.store.delete_orphaned_players()
        self.log.info("Deleted %d orphaned players", deleted)
        return deleted
