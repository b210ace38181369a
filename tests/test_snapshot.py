from __future__ import annotations

import json

from engine.actions import AdvanceDay, AdvanceMonth, AppointMinister, ProposeBill, StartProject
from engine.pipeline import fire_event
from engine.session import GameSession
from engine.snapshot import dumps_snapshot, loads_snapshot, snapshot_from_dict, snapshot_to_dict


def _busy_session(session: GameSession) -> GameSession:
    session.dispatch(AppointMinister("m_varga"))
    session.dispatch(ProposeBill("pension_reform"))
    session.dispatch(StartProject("HIGH_SPEED_RAIL"))
    for _ in range(10):
        session.dispatch(AdvanceDay())
    session.dispatch(AdvanceMonth())
    return session


def test_round_trip_through_json(session: GameSession) -> None:
    state = _busy_session(session).state
    state = fire_event(state, session.catalog.event("rebellion_stage_1").to_pending())

    text = dumps_snapshot(state)
    back = loads_snapshot(text)
    assert back == state
    assert back.time.date == state.time.date
    assert back.government.ministers[0].appointment_date == state.government.ministers[0].appointment_date
    assert back.events.active_event == state.events.active_event


def test_dict_form_is_plain_json(session: GameSession) -> None:
    raw = snapshot_to_dict(session.state)
    assert isinstance(raw["time"]["date"], str)
    assert json.loads(json.dumps(raw)) == raw
    assert snapshot_from_dict(raw) == session.state


def test_malformed_input_is_rejected(session: GameSession) -> None:
    assert loads_snapshot("not json") is None
    assert loads_snapshot("[]") is None
    assert loads_snapshot(json.dumps({"version": 99, "state": {}})) is None

    raw = snapshot_to_dict(session.state)
    bad_date = {**raw, "time": {**raw["time"], "date": 20250101}}
    assert snapshot_from_dict(bad_date) is None

    bad_number = {**raw, "stats": {**raw["stats"], "gdp": "lots"}}
    assert snapshot_from_dict(bad_number) is None

    missing_id = {**raw, "notifications": [{"kind": "info", "title": "x", "message": "y", "date": "2025-01-01"}]}
    assert snapshot_from_dict(missing_id) is None

    assert snapshot_from_dict({**raw, "surprise": 1}) is None
    assert snapshot_from_dict("state") is None
