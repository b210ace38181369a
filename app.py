"""Head of State (Streamlit)

UI/Experience

Principles:
- UI only renders + triggers.
- Every change goes through GameSession.dispatch(); the page never edits the snapshot.
- Time advances on button presses here; engine.scheduler is the real-time driver for other hosts.

Entry point: streamlit run app.py
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

import streamlit as st

from core.cabinet import cabinet_effectiveness, ministry_effectiveness
from core.parliament import government_seats
from core.situations import EMERGENCY_CATEGORIES, EMERGENCY_KINDS
from core.social import PROTEST_ACTIONS
from core.state import IDEOLOGIES, GameState

from engine.actions import (
    AdvanceDay,
    AdvanceMonth,
    AppointMinister,
    ApplyDebtTrap,
    CampaignRally,
    CampaignSmear,
    CensorMedia,
    ClearVoteResult,
    DiplomacyAction,
    DismissNotification,
    EnterEmergencyMode,
    ExitEmergencyMode,
    FireMinister,
    ForeignInvestment,
    FundPublicMedia,
    LoadSnapshot,
    NegotiateWithFaction,
    OpenNotification,
    PauseProject,
    ProposeBill,
    ResolveEvent,
    ResolveProtest,
    SetSpeed,
    StartGame,
    StartProject,
    TogglePause,
    UpdatePolicy,
    VoteOnBill,
)
from engine.config import EngineConfig
from engine.logging import dumps_run_export
from engine.session import GameSession
from engine.snapshot import dumps_snapshot, loads_snapshot


APP_TITLE = "Head of State"
APP_VERSION = "1.0.0"

SPEED_LABELS = {0: "Paused", 1: "Slow", 2: "Normal", 3: "Fast"}

st.set_page_config(page_title=APP_TITLE, page_icon="🏛️", layout="wide")

CSS = """
<style>
.block-container {padding-top: 1.2rem; padding-bottom: 2.5rem; max-width: 1180px;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 18px 18px 14px 18px;
  background: rgba(255,255,255,0.02);
}
.pill {
  display: inline-block;
  padding: 2px 10px;
  border-radius: 999px;
  border: 1px solid rgba(255,255,255,0.12);
  font-size: 12px;
  opacity: .85;
}
.pill.warn {border-color: rgba(255,190,90,0.35);}
.pill.ok {border-color: rgba(120,255,160,0.25);}
.pill.bad {border-color: rgba(255,120,120,0.25);}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)


# =========================
# Helpers
# =========================


def _now_id() -> str:
    return datetime.utcnow().strftime("%Y%m%d%H%M%S%f")


def _stat_badge(val: float, lo: float, hi: float) -> str:
    if val <= lo:
        return "bad"
    if val >= hi:
        return "ok"
    return "warn"


def _pill(label: str, val: float, lo: float, hi: float) -> str:
    return f'<span class="pill {_stat_badge(val, lo, hi)}">{label}: {val:.0f}</span>'


def _session() -> GameSession:
    return st.session_state.session


def _dispatch(action: object) -> GameState:
    return _session().dispatch(action)


def _advance_days(days: int) -> None:
    """Step the calendar, running the month update on boundaries. Stops at the first decision."""
    for _ in range(int(days)):
        before = _session().state.time.date
        after = _dispatch(AdvanceDay()).time.date
        if after == before:
            return
        if (after.year, after.month) != (before.year, before.month):
            _dispatch(AdvanceMonth())
        if _session().state.events.active_event is not None:
            return


# =========================
# Session State
# =========================


def _ensure_state() -> None:
    ss = st.session_state
    if "run_id" not in ss:
        ss.run_id = _now_id()
    if "base_seed" not in ss:
        ss.base_seed = 42
    if "session" not in ss:
        ss.session = GameSession(config=EngineConfig(base_seed=int(ss.base_seed)))


def _reset_run() -> None:
    ss = st.session_state
    ss.run_id = _now_id()
    ss.session = GameSession(config=EngineConfig(base_seed=int(ss.base_seed)))


# =========================
# Pages
# =========================


def page_setup() -> None:
    st.markdown(f"## {APP_TITLE}")
    st.markdown(
        "Pick a country and an ideology in the sidebar, then start your term. "
        "Keep the economy afloat, your coalition together and the streets quiet."
    )
    countries = list(_session().catalog.countries.values())
    rows = [
        {"Country": c.name, "Region": c.region, "GDP (bn)": c.gdp, "Population (m)": c.population, "Stability": c.stability}
        for c in countries
    ]
    st.dataframe(rows, use_container_width=True, hide_index=True)


def _header(state: GameState) -> None:
    p = state.player
    st.markdown(f"### {p.name} of {p.country_name} · {p.party_name} ({p.ideology})")
    a, b, c, d, e, f = st.columns(6)
    a.metric("Date", state.time.date.isoformat())
    b.metric("Budget (bn)", f"{state.resources.budget:,.1f}")
    c.metric("Political capital", f"{state.resources.political_capital:.0f}")
    d.metric("Popularity", f"{state.stats.popularity:.1f}")
    e.metric("Stability", f"{state.resources.stability:.1f}")
    f.metric("GDP (bn)", f"{state.stats.gdp:,.1f}")
    pills = [
        _pill("Tension", 100.0 - state.social.social_tension, 30, 70),
        _pill("Human rights", state.social.human_rights, 40, 70),
        _pill("Support in parliament", state.government.parliament.government_support, 45, 55),
        f'<span class="pill">Inflation: {state.stats.inflation:.1%}</span>',
        f'<span class="pill">Unemployment: {state.stats.unemployment:.1%}</span>',
    ]
    st.markdown(" ".join(pills), unsafe_allow_html=True)


def _time_controls(state: GameState) -> None:
    c1, c2, c3, c4 = st.columns([1.2, 1.0, 1.0, 1.0])
    with c1:
        speed = st.select_slider(
            "Speed",
            options=list(SPEED_LABELS),
            value=int(state.time.speed),
            format_func=lambda s: SPEED_LABELS[s],
            key="speed_slider",
        )
        if speed != state.time.speed:
            _dispatch(SetSpeed(int(speed)))
            st.rerun()
    with c2:
        label = "Pause" if state.time.is_playing else "Resume"
        if st.button(label, use_container_width=True):
            _dispatch(TogglePause())
            st.rerun()
    with c3:
        if st.button("Next day", use_container_width=True, disabled=state.events.active_event is not None):
            _advance_days(1)
            st.rerun()
    with c4:
        if st.button("Next week", use_container_width=True, disabled=state.events.active_event is not None):
            _advance_days(7)
            st.rerun()


def _active_event(state: GameState) -> None:
    ev = state.events.active_event
    if ev is None:
        return
    st.markdown('<div class="card">', unsafe_allow_html=True)
    tag = f" · chapter {ev.story_stage}" if ev.story_stage else ""
    st.markdown(f"#### {ev.title}")
    st.caption(f"{ev.category}{tag}")
    st.write(ev.description)
    cols = st.columns(max(1, len(ev.choices)))
    for i, (col, choice) in enumerate(zip(cols, ev.choices)):
        with col:
            st.markdown(f"**{choice.label}**")
            if choice.description:
                st.caption(choice.description)
            if choice.requirements:
                st.caption("Requires: " + ", ".join(f"{k} ≥ {v:g}" for k, v in choice.requirements.items()))
            if st.button("Choose", key=f"choice_{ev.id}_{i}", use_container_width=True):
                _dispatch(ResolveEvent(i))
                st.rerun()
    st.markdown("</div>", unsafe_allow_html=True)


def _emergency(state: GameState) -> None:
    em = state.events.emergency
    if not em.active:
        return
    st.error(f"Emergency: {em.kind} (severity {em.severity:.0f}, {em.turns_remaining} months left)")
    cols = st.columns(len(EMERGENCY_CATEGORIES))
    allocation: Dict[str, float] = {}
    for col, cat in zip(cols, EMERGENCY_CATEGORIES):
        with col:
            allocation[cat] = float(st.slider(cat.title(), 0, 100, 25, key=f"alloc_{cat}"))
    if st.button("Deploy response and end emergency"):
        _dispatch(ExitEmergencyMode(allocation))
        st.rerun()


def _notifications(state: GameState) -> None:
    if not state.notifications:
        return
    with st.expander(f"Notifications ({sum(1 for n in state.notifications if not n.read)} unread)"):
        for n in reversed(state.notifications[-20:]):
            c1, c2, c3 = st.columns([4.0, 1.0, 1.0])
            with c1:
                mark = "" if n.read else "● "
                st.markdown(f"{mark}**{n.title}** · {n.date.isoformat()}")
                st.caption(n.message)
            with c2:
                if st.button("Open", key=f"open_{n.id}"):
                    _dispatch(OpenNotification(n.id))
                    st.rerun()
            with c3:
                if st.button("Dismiss", key=f"dismiss_{n.id}"):
                    _dispatch(DismissNotification(n.id))
                    st.rerun()


def page_run() -> None:
    state = _session().state
    _header(state)
    _time_controls(state)
    st.markdown("---")
    _active_event(state)
    _emergency(state)
    _notifications(state)

    st.markdown("#### Policy")
    c1, c2 = st.columns(2)
    with c1:
        tax = st.slider("Tax rate", 0.0, 1.0, float(state.policies.tax_rate), 0.01)
        if abs(tax - state.policies.tax_rate) > 1e-9 and st.button("Apply tax rate"):
            _dispatch(UpdatePolicy("tax_rate", float(tax)))
            st.rerun()
    with c2:
        spending = st.number_input("Public spending (bn)", min_value=0.0, value=float(state.policies.public_spending), step=5.0)
        if abs(spending - state.policies.public_spending) > 1e-9 and st.button("Apply spending"):
            _dispatch(UpdatePolicy("public_spending", float(spending)))
            st.rerun()

    st.markdown("#### National projects")
    catalog = _session().catalog
    running = {p.id: p for p in state.policies.active_projects}
    for proj in catalog.projects.values():
        live = running.get(proj.id)
        c1, c2 = st.columns([4.0, 1.0])
        with c1:
            status = f"{live.status} · {live.progress:.0f}%" if live else "not started"
            st.markdown(f"**{proj.name}** · {proj.cost_per_turn:g} bn/month · {status}")
            if live:
                st.progress(min(1.0, live.progress / 100.0))
        with c2:
            if live is None or live.status == "PAUSED":
                if st.button("Build", key=f"proj_start_{proj.id}"):
                    _dispatch(StartProject(proj.id))
                    st.rerun()
            elif live.status == "BUILDING":
                if st.button("Pause", key=f"proj_pause_{proj.id}"):
                    _dispatch(PauseProject(proj.id))
                    st.rerun()


def page_government() -> None:
    state = _session().state
    catalog = _session().catalog
    parl = state.government.parliament

    st.markdown("#### Cabinet")
    if state.government.ministers:
        st.caption(f"Cabinet effectiveness {cabinet_effectiveness(state.government.ministers):.1f}%")
    appointed = {m.id for m in state.government.ministers}
    for m in state.government.ministers:
        c1, c2 = st.columns([4.0, 1.0])
        with c1:
            traits = f" · {', '.join(m.traits)}" if m.traits else ""
            st.markdown(f"**{m.ministry}**: {m.name} (loyalty {m.loyalty:.0f}, competence {m.competence:.0f}, effectiveness {ministry_effectiveness(m):.0f}%, scandals {m.scandals}){traits}")
        with c2:
            if st.button("Fire", key=f"fire_{m.id}"):
                _dispatch(FireMinister(m.id))
                st.rerun()
    candidates = [m for m in catalog.ministers.values() if m.id not in appointed]
    if candidates:
        pick = st.selectbox("Candidate", candidates, format_func=lambda m: f"{m.name} ({m.ministry})")
        if st.button("Appoint"):
            _dispatch(AppointMinister(pick.id))
            st.rerun()

    st.markdown("#### Parliament")
    st.caption(f"Next election: {parl.next_election_date.isoformat() if parl.next_election_date else '-'} · cohesion {parl.party_cohesion:.0f} · government seats {government_seats(parl.parties)}/{parl.total_seats}")
    st.dataframe(
        [{"Party": p.name, "Ideology": p.ideology, "Seats": p.seats, "Government": p.is_government} for p in parl.parties],
        use_container_width=True,
        hide_index=True,
    )
    if parl.last_vote_result is not None:
        r = parl.last_vote_result
        verdict = "approved" if r.approved else "rejected"
        st.info(f"{r.title}: {verdict} ({r.yes} yes / {r.no} no / {r.abstain} abstain)")
        if st.button("Clear result"):
            _dispatch(ClearVoteResult())
            st.rerun()

    if parl.active_bill is not None:
        st.markdown(f"**On the floor:** {parl.active_bill.title} (needs {parl.active_bill.required_majority:.0f}%)")
        if st.button("Call the vote"):
            _dispatch(VoteOnBill())
            st.rerun()
    else:
        bill = st.selectbox("Bill", list(catalog.bills.values()), format_func=lambda b: b.title)
        st.caption(bill.description)
        if st.button("Propose bill"):
            _dispatch(ProposeBill(bill.id))
            st.rerun()

    st.markdown("#### Factions")
    for fac in parl.factions:
        c1, c2, c3 = st.columns([3.0, 1.2, 1.0])
        with c1:
            st.markdown(f"**{fac.name}** · {fac.faction_type} · {fac.stance} · loyalty {fac.loyalty_to_leader:.0f}")
        with c2:
            pc = st.number_input("PC", min_value=0.0, value=10.0, step=5.0, key=f"neg_pc_{fac.id}")
        with c3:
            if st.button("Negotiate", key=f"neg_{fac.id}"):
                _dispatch(NegotiateWithFaction(fac.id, float(pc)))
                st.rerun()


def page_society() -> None:
    state = _session().state
    social = state.social

    st.markdown("#### Interest groups")
    st.dataframe(
        [
            {"Group": g.name, "Approval": round(g.approval, 1), "Power": g.power, "Population (m)": round(g.population_size, 2)}
            for g in social.interest_groups
        ],
        use_container_width=True,
        hide_index=True,
    )

    st.markdown("#### Protests")
    if not social.active_protests:
        st.caption("The streets are quiet.")
    for gid, pr in social.active_protests.items():
        st.markdown(
            f"**{pr.group_name}** · intensity {pr.intensity:.0f} · {pr.participants:,.0f} people"
            + (" · escalating" if pr.escalating else "")
        )
        cols = st.columns(len(PROTEST_ACTIONS))
        for col, act in zip(cols, PROTEST_ACTIONS):
            with col:
                if st.button(act.title(), key=f"protest_{gid}_{act}"):
                    _dispatch(ResolveProtest(gid, act))
                    st.rerun()

    st.markdown("#### Media")
    media = social.media_state
    st.caption(f"Freedom {media.freedom:.0f} · support {media.support:.0f} · censorship {media.censorship:.0f}")
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Censor media"):
            _dispatch(CensorMedia())
            st.rerun()
    with c2:
        amount = st.number_input("Public media funding (bn)", min_value=0.0, value=1.0, step=0.5)
        if st.button("Fund public media"):
            _dispatch(FundPublicMedia(float(amount)))
            st.rerun()

    if social.campaign is not None and social.campaign.active:
        camp = social.campaign
        st.markdown("#### Campaign")
        st.caption(f"{camp.months_until_election} months to the vote · momentum {camp.momentum:.0f}")
        target = st.selectbox("Rally target", social.interest_groups, format_func=lambda g: g.name)
        budget = st.number_input("Rally budget (bn)", min_value=0.0, value=1.0, step=0.5)
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Hold rally"):
                _dispatch(CampaignRally(target.id, float(budget)))
                st.rerun()
        with c2:
            if st.button("Launch smear campaign"):
                _dispatch(CampaignSmear())
                st.rerun()


def page_world() -> None:
    state = _session().state
    countries = state.diplomacy.countries
    if not countries:
        return
    st.dataframe(
        [
            {
                "Country": c.name,
                "Relation": round(c.relation, 1),
                "Trade": c.trade_treaty,
                "Defense": c.defense_treaty,
                "Influence": round(c.player_influence, 1),
                "Debt held": round(c.debt_held_by_player, 2),
                "Satellite": c.is_satellite,
            }
            for c in countries
        ],
        use_container_width=True,
        hide_index=True,
    )
    target = st.selectbox("Country", countries, format_func=lambda c: c.name)
    cols = st.columns(4)
    for col, act in zip(cols, ("IMPROVE", "HARM", "TRADE_TREATY", "DEFENSE_TREATY")):
        with col:
            if st.button(act.replace("_", " ").title(), key=f"dip_{act}"):
                _dispatch(DiplomacyAction(target.id, act))
                st.rerun()
    c1, c2 = st.columns(2)
    with c1:
        amount = st.number_input("Investment (bn)", min_value=0.0, value=5.0, step=1.0)
        if st.button("Invest"):
            _dispatch(ForeignInvestment(target.id, float(amount)))
            st.rerun()
    with c2:
        if st.button("Call in the debt"):
            _dispatch(ApplyDebtTrap(target.id))
            st.rerun()

    with st.expander("Declare a state of emergency"):
        kind = st.selectbox("Kind", EMERGENCY_KINDS)
        if st.button("Declare", disabled=state.events.emergency.active):
            _dispatch(EnterEmergencyMode(kind))
            st.rerun()


def page_log() -> None:
    logs: List[str] = list(_session().state.logs)
    if not logs:
        st.caption("Nothing has happened yet.")
        return
    for line in reversed(logs[-200:]):
        st.markdown(f"- {line}")


def export_import_controls() -> None:
    ss = st.session_state
    session = _session()
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Save / Load")

    st.sidebar.download_button(
        "Download save",
        data=dumps_snapshot(session.state).encode("utf-8"),
        file_name=f"head_of_state_{ss.get('run_id', 'run')}.json",
        mime="application/json",
        disabled=not session.state.started,
    )
    st.sidebar.download_button(
        "Download run log",
        data=dumps_run_export(session.export_run()).encode("utf-8"),
        file_name=f"head_of_state_run_{ss.get('run_id', 'run')}.json",
        mime="application/json",
        disabled=not session.state.started,
    )

    up = st.sidebar.file_uploader("Load save", type=["json"], accept_multiple_files=False)
    if up is not None and ss.get("loaded_upload") != up.name:
        snap = loads_snapshot(up.read().decode("utf-8"))
        if snap is None:
            st.sidebar.error("That file is not a valid save.")
        else:
            _dispatch(LoadSnapshot(snap))
            ss.loaded_upload = up.name
            st.sidebar.success("Save loaded.")
            st.rerun()


def sidebar() -> str:
    ss = st.session_state
    session = _session()
    started = session.state.started

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")
    st.sidebar.markdown("---")

    countries = list(session.catalog.countries.values())
    country = st.sidebar.selectbox("Country", countries, format_func=lambda c: c.name, disabled=started)
    ideology = st.sidebar.selectbox("Ideology", IDEOLOGIES, index=IDEOLOGIES.index("Centrist"), disabled=started)
    name = st.sidebar.text_input("Your title", value="President", disabled=started)
    party = st.sidebar.text_input("Party name", value="", disabled=started)
    ss.base_seed = st.sidebar.number_input("Seed", value=int(ss.base_seed), step=1, disabled=started)

    cols = st.sidebar.columns(2)
    with cols[0]:
        if st.button("Start term", disabled=started, use_container_width=True):
            if int(ss.base_seed) != session.config.base_seed:
                _reset_run()
            _dispatch(StartGame(country_id=country.id, ideology=ideology, player_name=name, party_name=party))
            st.rerun()
    with cols[1]:
        if st.button("Reset", use_container_width=True):
            _reset_run()
            st.rerun()

    export_import_controls()

    st.sidebar.markdown("---")
    return st.sidebar.radio("Page", ["Play", "Government", "Society", "World", "Log"], index=0)


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    page = sidebar()

    if not _session().state.started:
        page_setup()
        return

    if page == "Play":
        page_run()
    elif page == "Government":
        page_government()
    elif page == "Society":
        page_society()
    elif page == "World":
        page_world()
    else:
        page_log()


if __name__ == "__main__":
    main()
