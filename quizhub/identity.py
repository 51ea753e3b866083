"""Maps durable host/player ids to the connection handle (sid) currently bound to them.

Authorization always goes through the durable id; the sid is only ever used
to check "is this command coming from the connection bound to that id" and
for delivery.
"""
from typing import Optional

from .models import Player, Session


class IdentityResolver:

    def __init__(self, session: Session):
        self.session = session

    def is_host(self, sid) -> bool:
        return sid is not None and self.session.host_sid == sid

    def is_host_id(self, host_id) -> bool:
        return self.session.host_id == host_id

    def player_by_id(self, player_id) -> Optional[Player]:
        return self.session.players.get(player_id)

    def player_for_sid(self, sid) -> Optional[Player]:
        if sid is None:
            return None
        for player in self.session.players.values():
            if player.sid == sid:
                return player
        return None

    def is_player(self, player_id, sid) -> bool:
        player = self.player_by_id(player_id)
        return player is not None and sid is not None and player.sid == sid

    def nickname_taken(self, nickname: str) -> bool:
        wanted = nickname.strip().casefold()
        return any(p.nickname.casefold() == wanted for p in self.session.players.values())

    def bind_host(self, sid) -> None:
        self.session.host_sid = sid

    def bind_player(self, player: Player, sid) -> None:
        self._release(sid)
        player.sid = sid
        player.connected = True

    def _release(self, sid) -> None:
        # A connection handle speaks for at most one player
        for player in self.session.players.values():
            if player.sid == sid:
                player.sid = None
                player.connected = False
