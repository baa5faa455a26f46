from __future__ import annotations

from models.event import ChangeEvent, ChangeKind
from models.state import StreamerState


def detect_changes(old: StreamerState | None, new: StreamerState) -> list[ChangeEvent]:
    """Compare two snapshots of the same broadcaster.

    A missing *old* snapshot is the baseline poll and yields nothing.
    Otherwise each rule below is checked independently:

    - online:  was offline, now live
    - offline: was live, now offline (carries the old start time)
    - title:   title differs and the new one is not empty
    - game:    game id differs, including to or from an empty id
    """
    if old is None:
        return []

    streamer = new.login
    changes: list[ChangeEvent] = []

    if not old.is_live and new.is_live:
        changes.append(ChangeEvent(kind=ChangeKind.ONLINE, streamer=streamer, state=new))

    if old.is_live and not new.is_live:
        changes.append(ChangeEvent(
            kind=ChangeKind.OFFLINE,
            streamer=streamer,
            state=new,
            stream_started_at=old.started_at,
        ))

    # An empty title is usually a transient gap in the API response.
    if old.title != new.title and new.title:
        changes.append(ChangeEvent(
            kind=ChangeKind.TITLE_CHANGE,
            streamer=streamer,
            state=new,
            old_value=old.title,
            new_value=new.title,
        ))

    if old.game_id != new.game_id:
        changes.append(ChangeEvent(
            kind=ChangeKind.GAME_CHANGE,
            streamer=streamer,
            state=new,
            old_value=old.game_name,
            new_value=new.game_name,
        ))

    return changes


def combine_changes(changes: list[ChangeEvent]) -> list[ChangeEvent]:
    """Fold a co-occurring title change and game change into one event.

    The merged event is appended after the remaining events.  When only one
    of the pair is present the list is returned unchanged.
    """
    title = next((c for c in changes if c.kind is ChangeKind.TITLE_CHANGE), None)
    game = next((c for c in changes if c.kind is ChangeKind.GAME_CHANGE), None)
    if title is None or game is None:
        return changes

    combined = ChangeEvent(
        kind=ChangeKind.TITLE_AND_GAME_CHANGE,
        streamer=title.streamer,
        state=title.state,
        old_title=title.old_value,
        new_title=title.new_value,
        old_game=game.old_value,
        new_game=game.new_value,
    )
    rest = [
        c for c in changes
        if c.kind not in (ChangeKind.TITLE_CHANGE, ChangeKind.GAME_CHANGE)
    ]
    return [*rest, combined]
