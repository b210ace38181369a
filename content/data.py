"""content.data

Built-in content tables, authored as plain mappings.
content.catalog normalises them through content.schemas.

Units: gdp and budget in billions, population in millions, rates as 0..1 fractions.
"""

from __future__ import annotations

from typing import Any, Dict, List

from core.state import GameState


def _group_approval(state: GameState, group_id: str, default: float = 50.0) -> float:
    for g in state.social.interest_groups:
        if g.id == group_id:
            return float(g.approval)
    return default


# =========================
# Countries
# =========================

COUNTRIES: List[Dict[str, Any]] = [
    {"id": "usa", "name": "United States", "region": "America", "ideology": "Capitalist",
     "stats": {"gdp": 25000, "population": 331, "inflation": 0.03, "unemployment": 0.04, "stability": 70}},
    {"id": "can", "name": "Canada", "region": "America", "ideology": "Centrist",
     "stats": {"gdp": 2100, "population": 38, "inflation": 0.03, "unemployment": 0.05, "stability": 82}},
    {"id": "mex", "name": "Mexico", "region": "America", "ideology": "Centrist",
     "stats": {"gdp": 1400, "population": 128, "inflation": 0.05, "unemployment": 0.035, "stability": 55}},
    {"id": "bra", "name": "Brazil", "region": "America", "ideology": "Socialist",
     "stats": {"gdp": 1900, "population": 214, "inflation": 0.06, "unemployment": 0.09, "stability": 50}},
    {"id": "arg", "name": "Argentina", "region": "America", "ideology": "Socialist",
     "stats": {"gdp": 630, "population": 46, "inflation": 0.12, "unemployment": 0.07, "stability": 45}},
    {"id": "col", "name": "Colombia", "region": "America", "ideology": "Centrist",
     "stats": {"gdp": 340, "population": 51, "inflation": 0.07, "unemployment": 0.11, "stability": 45}},
    {"id": "deu", "name": "Germany", "region": "Europe", "ideology": "Centrist",
     "stats": {"gdp": 4200, "population": 83, "inflation": 0.03, "unemployment": 0.03, "stability": 85}},
    {"id": "rus", "name": "Russia", "region": "Europe", "ideology": "Authoritarian",
     "stats": {"gdp": 2200, "population": 144, "inflation": 0.07, "unemployment": 0.04, "stability": 60}},
    {"id": "chn", "name": "China", "region": "Asia", "ideology": "Authoritarian",
     "stats": {"gdp": 17700, "population": 1412, "inflation": 0.02, "unemployment": 0.05, "stability": 75}},
    {"id": "ind", "name": "India", "region": "Asia", "ideology": "Centrist",
     "stats": {"gdp": 3400, "population": 1408, "inflation": 0.06, "unemployment": 0.08, "stability": 60}},
    {"id": "nga", "name": "Nigeria", "region": "Africa", "ideology": "Centrist",
     "stats": {"gdp": 480, "population": 218, "inflation": 0.09, "unemployment": 0.14, "stability": 40}},
    {"id": "aus", "name": "Australia", "region": "Oceania", "ideology": "Capitalist",
     "stats": {"gdp": 1700, "population": 26, "inflation": 0.03, "unemployment": 0.04, "stability": 85}},
]


# =========================
# Contextual events
# =========================

EVENTS: List[Dict[str, Any]] = [
    {
        "id": "strike_transport",
        "title": "Transport Strike",
        "description": "Bus and rail unions walk out over wages. Cities are gridlocked.",
        "category": "social",
        "weight": 2,
        # legacy predicate; kept alongside the declarative conditions
        "trigger": lambda s: s.stats.unemployment > 0.06,
        "choices": [
            {
                "label": "Negotiate a pay deal",
                "description": "Costly but calms the streets",
                "consequences": {
                    "immediate": {"budget": -10, "popularity": 3},
                    "approval_modifiers": [{"group_id": "unions", "change": 5, "duration": 6}],
                },
            },
            {
                "label": "Hold the line",
                "description": "No concessions",
                "consequences": {
                    "immediate": {"stability": -3, "popularity": -2},
                    "approval_modifiers": [{"group_id": "unions", "change": -10, "duration": 6}],
                },
            },
        ],
    },
    {
        "id": "tech_boom",
        "title": "Tech Boom",
        "description": "A wave of start-ups is drawing investment into the country.",
        "category": "economy",
        "condition": {"stability_min": 50},
        "choices": [
            {
                "label": "Co-invest in research",
                "consequences": {"immediate": {"budget": -20, "research_points": 15, "gdp": 10}},
            },
            {
                "label": "Tax the windfall",
                "consequences": {
                    "immediate": {"budget": 15, "popularity": -2},
                    "approval_modifiers": [{"group_id": "business", "change": -5, "duration": 3}],
                },
            },
        ],
    },
    {
        "id": "corruption_scandal",
        "title": "Procurement Scandal",
        "description": "Journalists uncover inflated public contracts in the road agency.",
        "category": "scandal",
        "condition": {"popularity_max": 65, "months_since_game_start": 1},
        "choices": [
            {
                "label": "Open an independent investigation",
                "consequences": {"immediate": {"political_capital": -10, "popularity": 4}},
            },
            {
                "label": "Make it go away",
                "description": "Quiet the press and hope it holds",
                "consequences": {
                    "immediate": {"political_capital": -5, "human_rights": -5},
                    "story_vars": {"coverup": True},
                    "delayed": {"event_id": "leaked_coverup", "turns_delay": 3},
                },
            },
        ],
    },
    {
        "id": "leaked_coverup",
        "title": "The Cover-up Leaks",
        "description": "Documents showing the government buried the procurement scandal are published.",
        "category": "scandal",
        "condition": {"story_vars": {"coverup": True}, "event_history_includes": ["corruption_scandal"]},
        "choices": [
            {
                "label": "Apologise publicly",
                "consequences": {"immediate": {"popularity": -8, "political_capital": -10}, "story_vars": {"coverup": False}},
            },
            {
                "label": "Deny everything",
                "consequences": {"immediate": {"popularity": -4, "stability": -3}},
            },
        ],
    },
    {
        "id": "imf_loan",
        "title": "IMF Rescue Package",
        "description": "With the treasury in the red, the IMF offers a loan tied to austerity.",
        "category": "economy",
        "trigger": lambda s: s.resources.budget < 0,
        "choices": [
            {
                "label": "Accept the programme",
                "consequences": {
                    "immediate": {"budget": 200, "popularity": -5},
                    "story_vars": {"imf_program": True},
                    "approval_modifiers": [{"group_id": "unions", "change": -10, "duration": 12}],
                },
            },
            {
                "label": "Refuse and print money",
                "consequences": {"immediate": {"stability": -5, "inflation": 0.02}},
            },
        ],
    },
    {
        "id": "fuel_price_spike",
        "title": "Fuel Price Spike",
        "description": "Pump prices jump again and truckers threaten to block highways.",
        "category": "economy",
        "chain_id": "energy_prices",
        "condition": {"inflation_min": 0.06},
        "choices": [
            {
                "label": "Subsidise fuel",
                "consequences": {
                    "immediate": {"budget": -15, "popularity": 2},
                    "approval_modifiers": [{"group_id": "rural", "change": 4, "duration": 3}],
                },
            },
            {
                "label": "Let prices float",
                "consequences": {
                    "immediate": {"popularity": -3},
                    "approval_modifiers": [{"group_id": "rural", "change": -6, "duration": 3}],
                },
            },
        ],
    },
    {
        "id": "opposition_motion",
        "title": "No-Confidence Motion",
        "description": "The opposition tables a motion of no confidence in your cabinet.",
        "category": "politics",
        "condition": {"popularity_max": 40, "minister_count": 1},
        "choices": [
            {
                "label": "Whip every vote",
                "requirements": {"political_capital": 20},
                "consequences": {"immediate": {"political_capital": -20, "stability": 3}},
            },
            {
                "label": "Reshuffle the cabinet",
                "consequences": {"immediate": {"popularity": 2, "stability": -2}},
            },
        ],
    },
    {
        "id": "student_march",
        "title": "Student March",
        "description": "Tens of thousands of students march for education funding.",
        "category": "social",
        "condition": {"any_protest_active": True, "social_tension_min": 40},
        "choices": [
            {
                "label": "Meet the student leaders",
                "consequences": {
                    "immediate": {"political_capital": -5},
                    "approval_modifiers": [{"group_id": "students", "change": 8, "duration": 6}],
                },
            },
            {
                "label": "Ignore the march",
                "consequences": {
                    "approval_modifiers": [{"group_id": "students", "change": -8, "duration": 6}],
                },
            },
        ],
    },
    {
        "id": "earthquake_south",
        "title": "Earthquake in the South",
        "description": "A magnitude 7.1 earthquake has levelled several towns.",
        "category": "disaster",
        "weight": 0.5,
        "condition": {"months_since_game_start": 2},
        "choices": [
            {
                "label": "Declare a national emergency",
                "consequences": {"immediate": {"stability": -2}},
            },
        ],
    },
    {
        "id": "flood_delta",
        "title": "River Delta Floods",
        "description": "Record rainfall has flooded farmland and riverside neighbourhoods.",
        "category": "disaster",
        "weight": 0.5,
        "condition": {"months_since_game_start": 4},
        "choices": [
            {
                "label": "Mobilise the relief effort",
                "consequences": {
                    "immediate": {"stability": -1},
                    "approval_modifiers": [{"group_id": "rural", "change": -5, "duration": 6}],
                },
            },
        ],
    },
]


# =========================
# Storylines
# =========================

REBELLION_STORYLINE: Dict[str, Any] = {
    "id": "rural_insurgency",
    "name": "Rural Insurgency",
    "description": "An armed rebellion grows in the countryside. Dialogue, force or neglect decide how it ends.",
    "required_conditions": {
        "months_since_game_start": 6,
        "popularity_max": 55,
        "custom_check": lambda s: _group_approval(s, "rural") < 40,
    },
    "stages": [
        {"stage": 1, "title": "First Disturbances", "event_id": "rebellion_stage_1", "auto_advance": True},
        {"stage": 2, "title": "Militias Form", "event_id": "rebellion_stage_2",
         "advance_condition": {"story_vars": {"rebellion_stage_2_resolved": True}}},
        {"stage": 3, "title": "Coordinated Attacks", "event_id": "rebellion_stage_3",
         "advance_condition": {"story_vars": {"rebellion_stage_3_resolved": True}}},
        {"stage": 4, "title": "Turning Point", "event_id": "rebellion_stage_4",
         "advance_condition": {"story_vars": {"rebellion_stage_4_resolved": True}}},
        {"stage": 5, "title": "Resolution", "event_id": "rebellion_stage_5_stalemate",
         "advance_condition": {"story_vars": {"rebellion_stage_5_resolved": True}}},
    ],
    "endings": [
        {
            "id": "peace_negotiated",
            "name": "Negotiated Peace",
            "description": "Agrarian reform and amnesty end the conflict.",
            "required_vars": {
                "rebellion_path": "diplomatic",
                "insurgency_strength": {"max": 60},
                "government_brutality": {"max": 40},
            },
            "effects": {
                "immediate": {"popularity": 15, "stability": 20},
                "approval_modifiers": [
                    {"group_id": "rural", "change": 30, "duration": 24},
                    {"group_id": "military", "change": -15, "duration": 12},
                ],
            },
        },
        {
            "id": "military_victory",
            "name": "Military Victory",
            "description": "The insurgency is crushed. Peace returns at a cost.",
            "required_vars": {
                "rebellion_path": "military",
                "insurgency_strength": {"max": 50},
                "government_brutality": {"min": 50},
            },
            "effects": {
                "immediate": {"popularity": -10, "stability": 15, "human_rights": -20},
                "approval_modifiers": [
                    {"group_id": "military", "change": 25, "duration": 18},
                    {"group_id": "rural", "change": -40, "duration": 36},
                ],
            },
        },
        {
            "id": "civil_war",
            "name": "Civil War",
            "description": "The conflict has become a full civil war.",
            "required_vars": {"insurgency_strength": {"min": 70}, "government_brutality": {"min": 60}},
            "effects": {"immediate": {"popularity": -30, "stability": -40, "budget": -200}},
            "is_game_ending": True,
        },
        {
            "id": "stalemate",
            "name": "Stalemate",
            "description": "Neither side can win. A low-intensity conflict drags on.",
            "required_vars": {
                "insurgency_strength": {"min": 40, "max": 70},
                "government_brutality": {"min": 30, "max": 60},
            },
            "effects": {
                "immediate": {"popularity": -15, "stability": -10},
                "approval_modifiers": [{"group_id": "rural", "change": -20, "duration": 24}],
            },
        },
    ],
}


def _stage_event(stage: int, event_id: str, title: str, description: str, choices: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": event_id,
        "title": title,
        "description": description,
        "category": "storyline",
        "storyline_id": "rural_insurgency",
        "story_stage": stage,
        "choices": choices,
    }


REBELLION_EVENTS: List[Dict[str, Any]] = [
    _stage_event(1, "rebellion_stage_1", "Unrest in the Countryside",
                 "Farmers block roads and burn crops, demanding land reform and basic services.", [
        {
            "label": "Send mediators",
            "description": "Buy time and trust",
            "consequences": {
                "immediate": {"budget": -5, "popularity": 3},
                "story_vars": {"rebellion_stage_1_resolved": True, "rebellion_path": "diplomatic",
                               "insurgency_strength": 20, "government_brutality": 0},
                "approval_modifiers": [
                    {"group_id": "rural", "change": 10, "duration": 6},
                    {"group_id": "military", "change": -5, "duration": 3},
                ],
            },
        },
        {
            "label": "Deploy riot police",
            "description": "Restore order by force",
            "consequences": {
                "immediate": {"budget": -10, "popularity": -5, "stability": 5},
                "story_vars": {"rebellion_stage_1_resolved": True, "rebellion_path": "military",
                               "insurgency_strength": 40, "government_brutality": 30},
                "approval_modifiers": [
                    {"group_id": "rural", "change": -20, "duration": 12},
                    {"group_id": "military", "change": 10, "duration": 6},
                ],
                "delayed": {"event_id": "rebellion_stage_2", "turns_delay": 2},
            },
        },
        {
            "label": "Ignore it",
            "description": "It will blow over",
            "consequences": {
                "immediate": {"political_capital": 5},
                "story_vars": {"rebellion_stage_1_resolved": True, "rebellion_path": "neglect",
                               "insurgency_strength": 50, "government_brutality": 0},
                "delayed": {"event_id": "rebellion_stage_2", "turns_delay": 1},
            },
        },
    ]),
    _stage_event(2, "rebellion_stage_2", "Armed Militias",
                 "Armed groups raid a police post in the mountains and publish a manifesto.", [
        {
            "label": "Offer amnesty and reform",
            "requirements": {"political_capital": 30},
            "consequences": {
                "immediate": {"political_capital": -30, "budget": -25, "popularity": 5},
                "story_vars": {"rebellion_stage_2_resolved": True, "rebellion_path": "diplomatic",
                               "insurgency_strength": 30},
                "approval_modifiers": [
                    {"group_id": "rural", "change": 20, "duration": 12},
                    {"group_id": "business", "change": -10, "duration": 6},
                ],
                "delayed": {"event_id": "rebellion_stage_3", "turns_delay": 3},
            },
        },
        {
            "label": "Counter-insurgency operation",
            "requirements": {"budget": 50},
            "consequences": {
                "immediate": {"budget": -50, "popularity": -10, "stability": 10},
                "story_vars": {"rebellion_stage_2_resolved": True, "rebellion_path": "military",
                               "insurgency_strength": 50, "government_brutality": 60},
                "approval_modifiers": [
                    {"group_id": "military", "change": 20, "duration": 12},
                    {"group_id": "rural", "change": -30, "duration": 18},
                ],
                "delayed": {"event_id": "rebellion_stage_3", "turns_delay": 2},
            },
        },
        {
            "label": "Contain and wait",
            "consequences": {
                "immediate": {"budget": -10, "stability": -5},
                "story_vars": {"rebellion_stage_2_resolved": True, "insurgency_strength": 60},
                "delayed": {"event_id": "rebellion_stage_3", "turns_delay": 1},
            },
        },
    ]),
    _stage_event(3, "rebellion_stage_3", "Coordinated Attacks",
                 "Rebels hit a power plant and two army convoys on the same night.", [
        {
            "label": "Seek international mediation",
            "consequences": {
                "immediate": {"political_capital": -20, "popularity": 2},
                "story_vars": {"rebellion_stage_3_resolved": True, "rebellion_path": "diplomatic",
                               "insurgency_strength": 35},
                "delayed": {"event_id": "rebellion_stage_4", "turns_delay": 2},
            },
        },
        {
            "label": "Full counter-offensive",
            "requirements": {"budget": 80},
            "consequences": {
                "immediate": {"budget": -80, "stability": 5, "human_rights": -10},
                "story_vars": {"rebellion_stage_3_resolved": True, "rebellion_path": "military",
                               "insurgency_strength": 40, "government_brutality": 75},
                "delayed": {"event_id": "rebellion_stage_4", "turns_delay": 1},
            },
        },
        {
            "label": "Hearts and minds",
            "requirements": {"budget": 40},
            "consequences": {
                "immediate": {"budget": -40, "popularity": 4},
                "story_vars": {"rebellion_stage_3_resolved": True, "insurgency_strength": 45,
                               "government_brutality": 35},
                "delayed": {"event_id": "rebellion_stage_4", "turns_delay": 3},
            },
        },
    ]),
    _stage_event(4, "rebellion_stage_4", "Turning Point",
                 "Intelligence locates the rebel commander. Every option is on the table.", [
        {
            "label": "Meet the commander in person",
            "requirements": {"political_capital": 25},
            "consequences": {
                "immediate": {"political_capital": -25},
                "story_vars": {"rebellion_stage_4_resolved": True, "rebellion_path": "diplomatic"},
                "delayed": {"event_id": "rebellion_stage_5_peace", "turns_delay": 1},
            },
        },
        {
            "label": "Authorise the capture operation",
            "consequences": {
                "immediate": {"budget": -30, "human_rights": -10},
                "story_vars": {"rebellion_stage_4_resolved": True, "rebellion_path": "military",
                               "government_brutality": 70},
                "delayed": {"event_id": "rebellion_stage_5_military", "turns_delay": 1},
            },
        },
        {
            "label": "Stay the course",
            "consequences": {
                "story_vars": {"rebellion_stage_4_resolved": True, "insurgency_strength": 55,
                               "government_brutality": 45},
                "delayed": {"event_id": "rebellion_stage_5_stalemate", "turns_delay": 2},
            },
        },
    ]),
    _stage_event(5, "rebellion_stage_5_peace", "Peace Accord",
                 "The rebels agree to lay down arms in exchange for land reform.", [
        {
            "label": "Announce the agreement",
            "consequences": {"immediate": {"popularity": 5}, "story_vars": {"rebellion_stage_5_resolved": True}},
        },
    ]),
    _stage_event(5, "rebellion_stage_5_military", "The Commander Captured",
                 "Special forces capture the rebel commander. Resistance collapses.", [
        {
            "label": "Declare victory",
            "consequences": {"immediate": {"stability": 5}, "story_vars": {"rebellion_stage_5_resolved": True}},
        },
    ]),
    _stage_event(5, "rebellion_stage_5_stalemate", "Frozen Conflict",
                 "Neither side can advance. The countryside settles into an uneasy standoff.", [
        {
            "label": "Accept the situation",
            "consequences": {"immediate": {"popularity": -3}, "story_vars": {"rebellion_stage_5_resolved": True}},
        },
    ]),
]

STORYLINES: List[Dict[str, Any]] = [REBELLION_STORYLINE]


# =========================
# Bills
# =========================

BILLS: List[Dict[str, Any]] = [
    {"id": "progressive_tax", "title": "Progressive Tax Reform", "type": "reform", "policy_area": "economy",
     "description": "Raise taxes on top incomes and lower them for the middle class.",
     "required_majority": 50, "urgency": "medium", "effects": {"budget": 50, "popularity": 5, "inflation": 0.01}},
    {"id": "fiscal_stimulus", "title": "Fiscal Stimulus Package", "type": "budget", "policy_area": "economy",
     "description": "Public investment and temporary tax cuts.",
     "required_majority": 50, "urgency": "high",
     "effects": {"budget": -80, "gdp": 30, "unemployment": -0.01, "inflation": 0.02}},
    {"id": "basic_income", "title": "Universal Basic Income", "type": "reform", "policy_area": "social",
     "description": "A monthly basic income for every citizen.",
     "required_majority": 60, "urgency": "low",
     "effects": {"budget": -120, "popularity": 15, "unemployment": -0.02, "inflation": 0.03}},
    {"id": "pension_reform", "title": "Pension Reform", "type": "reform", "policy_area": "social",
     "description": "Raise minimum pensions and adjust the retirement age.",
     "required_majority": 50, "urgency": "medium", "effects": {"budget": -40, "popularity": 10}},
    {"id": "citizen_security", "title": "Citizen Security Act", "type": "policy_change", "policy_area": "security",
     "description": "Broader police powers and tougher sentences for petty crime.",
     "required_majority": 50, "urgency": "medium", "effects": {"stability": 5, "popularity": -3}},
    {"id": "anticrime_plan", "title": "National Anti-Crime Plan", "type": "budget", "policy_area": "security",
     "description": "Major investment in policing and technology.",
     "required_majority": 50, "urgency": "high", "effects": {"budget": -60, "stability": 10, "popularity": 5}},
    {"id": "education_reform", "title": "Comprehensive Education Reform", "type": "reform", "policy_area": "education",
     "description": "Modernise the curriculum and invest in public schools.",
     "required_majority": 50, "urgency": "low", "effects": {"budget": -50, "popularity": 8}},
    {"id": "emergency_relief", "title": "Emergency Relief Act", "type": "crisis_response", "policy_area": "health",
     "description": "Fast-track funds for hospitals and shelters.",
     "required_majority": 50, "urgency": "crisis", "effects": {"budget": -40, "stability": 8}},
    {"id": "term_extension", "title": "Presidential Term Amendment", "type": "constitutional", "policy_area": "social",
     "description": "Extend the presidential term by two years.",
     "required_majority": 66, "urgency": "low", "effects": {"political_capital": 20, "popularity": -5, "human_rights": -5}},
]


# =========================
# Projects / ministers
# =========================

PROJECTS: List[Dict[str, Any]] = [
    {"id": "NUCLEAR_PROGRAM", "name": "Nuclear Programme", "cost_per_turn": 30},
    {"id": "SPACE_AGENCY", "name": "Space Agency", "cost_per_turn": 20},
    {"id": "HIGH_SPEED_RAIL", "name": "High-Speed Rail", "cost_per_turn": 15},
    {"id": "NEW_CAPITAL_CITY", "name": "New Capital City", "cost_per_turn": 40},
    {"id": "OLYMPICS", "name": "Olympic Games", "cost_per_turn": 25},
]

MINISTRIES = ("Economy", "Interior", "Foreign Affairs", "Defense", "Health", "Education")

MINISTER_CANDIDATES: List[Dict[str, Any]] = [
    {"id": "m_ortega", "name": "Lucia Ortega", "ministry": "Economy", "traits": ["Technocrat"],
     "loyalty": 60, "popularity": 55, "competence": 85, "corruption": 5, "ambition": 40},
    {"id": "m_varga", "name": "Tomas Varga", "ministry": "Economy", "traits": ["Corrupt", "Loyal"],
     "loyalty": 85, "popularity": 40, "competence": 60, "corruption": 70, "ambition": 20},
    {"id": "m_reyes", "name": "Ana Reyes", "ministry": "Interior", "traits": ["Hardliner"],
     "loyalty": 70, "popularity": 45, "competence": 70, "corruption": 15, "ambition": 65},
    {"id": "m_klein", "name": "David Klein", "ministry": "Foreign Affairs", "traits": ["Diplomat"],
     "loyalty": 55, "popularity": 65, "competence": 80, "corruption": 5, "ambition": 75},
    {"id": "m_mbeki", "name": "Grace Mbeki", "ministry": "Defense", "traits": ["Veteran"],
     "loyalty": 75, "popularity": 60, "competence": 75, "corruption": 10, "ambition": 30},
    {"id": "m_silva", "name": "Pedro Silva", "ministry": "Health", "traits": ["Incompetent"],
     "loyalty": 80, "popularity": 50, "competence": 25, "corruption": 20, "ambition": 10},
    {"id": "m_chen", "name": "Mei Chen", "ministry": "Education", "traits": ["Reformer"],
     "loyalty": 50, "popularity": 70, "competence": 80, "corruption": 0, "ambition": 80},
]
