import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from bloodpact.application import dtos
from bloodpact.application.contract import (
    COMMAND_INTENTS,
    CONTRACT_DTO_TYPES,
    CONTRACT_VERSION,
    QUERY_INTENTS,
)
from bloodpact.application.services import action_service, knowledge_service
from bloodpact.application.services.contract_service import ContractService
from bloodpact.application.services.snapshot_service import SnapshotService
from bloodpact.application.services.turn_service import TurnService
from bloodpact.domain.models import action
from bloodpact.domain.services import pathfinding, visibility

INTENT_PROVIDERS = (
    action_service,
    TurnService,
    SnapshotService,
    ContractService,
    knowledge_service,
    visibility,
    pathfinding,
)


class ApplicationContractTests(unittest.TestCase):
    def test_contract_version_uses_semver(self) -> None:
        self.assertRegex(CONTRACT_VERSION, r"^\d+\.\d+\.\d+$")

    def test_every_declared_intent_has_an_implementation(self) -> None:
        for name in COMMAND_INTENTS + QUERY_INTENTS:
            providers = [provider for provider in INTENT_PROVIDERS if callable(getattr(provider, name, None))]
            self.assertTrue(providers, f"Missing contract intent: {name}")

    def test_intents_are_not_declared_twice(self) -> None:
        names = COMMAND_INTENTS + QUERY_INTENTS
        self.assertEqual(len(names), len(set(names)))

    def test_declared_dto_types_exist(self) -> None:
        for dto_name in CONTRACT_DTO_TYPES:
            self.assertTrue(
                hasattr(dtos, dto_name) or hasattr(action, dto_name),
                f"Missing contract DTO: {dto_name}",
            )


if __name__ == "__main__":
    unittest.main()
