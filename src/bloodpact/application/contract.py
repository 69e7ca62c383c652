CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "execute_action",
    "run_round",
    "take_turn",
    "create_snapshot_intent",
    "load_snapshot_intent",
    "undo_intent",
    "sign_contract",
    "decline_contract",
)

QUERY_INTENTS = (
    "get_character_knowledge",
    "get_legal_actions",
    "get_unexplored_frontier_tiles",
    "get_visible_tiles",
    "line_of_sight",
    "find_path",
    "get_reachable_tiles",
    "list_snapshots_intent",
)

CONTRACT_DTO_TYPES = (
    "ActionResult",
    "CharacterKnowledge",
    "LegalActionView",
    "StatusView",
    "SnapshotView",
    "TurnSummaryView",
)
