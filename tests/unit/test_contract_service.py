import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from bloodpact.application.services.contract_service import ContractService
from bloodpact.domain.events import ContractSigned, EventKind
from bloodpact.domain.models.action import IssueContractAction
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.world import World


class ContractServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World.blank(5, 5)
        self.world.turn = 4
        self.ann = Character(id="ann", name="Ann", position=Position(0, 0))
        self.bo = Character(id="bo", name="Bo", position=Position(1, 0))
        self.world.characters = [self.ann, self.bo]
        self.published = []
        self.service = ContractService(event_publisher=self.published.append)
        self.contract = self.service.record_offer(
            self.world,
            self.ann,
            IssueContractAction(target_id="bo", contents="No blades drawn", expiry=3),
        )

    def test_offer_is_pending_for_the_target_only(self) -> None:
        self.assertTrue(self.contract.id.startswith("contract-"))
        self.assertEqual(7, self.contract.expiry_turn)
        self.assertEqual([self.contract], self.service.pending_offers_for(self.world, self.bo))
        self.assertEqual([], self.service.pending_offers_for(self.world, self.ann))

    def test_sign_marks_contract_and_publishes(self) -> None:
        signed = self.service.sign_contract(self.world, self.contract.id, self.bo)

        self.assertTrue(signed.signed)
        self.assertEqual(EventKind.CONTRACT_SIGNED, self.world.events[-1].kind)
        self.assertEqual(("ann", "bo"), self.world.events[-1].witness_ids)
        self.assertEqual(
            [ContractSigned(contract_id=self.contract.id, issuer_id="ann", target_id="bo", turn=4)],
            self.published,
        )
        self.assertEqual([], self.service.pending_offers_for(self.world, self.bo))

    def test_only_the_target_may_answer(self) -> None:
        with self.assertRaises(ValueError):
            self.service.sign_contract(self.world, self.contract.id, self.ann)
        with self.assertRaises(ValueError):
            self.service.decline_contract(self.world, self.contract.id, self.ann)
        with self.assertRaises(KeyError):
            self.service.sign_contract(self.world, "contract-missing", self.bo)

    def test_decline_removes_the_offer(self) -> None:
        self.service.decline_contract(self.world, self.contract.id, self.bo)

        self.assertEqual([], self.world.active_contracts)
        self.assertEqual(EventKind.CONTRACT_DECLINED, self.world.events[-1].kind)

    def test_signed_contracts_report_expiry_without_removal(self) -> None:
        self.service.sign_contract(self.world, self.contract.id, self.bo)

        self.world.turn = 7
        self.assertEqual([], self.service.expired_contracts(self.world))
        self.world.turn = 8
        self.assertEqual([self.contract], self.service.expired_contracts(self.world))
        self.assertEqual(1, len(self.world.active_contracts))


if __name__ == "__main__":
    unittest.main()
