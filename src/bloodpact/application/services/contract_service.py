from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional

from bloodpact.domain.events import ContractSigned, EventKind, GameEvent
from bloodpact.domain.models.action import IssueContractAction
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.contract import BloodContract
from bloodpact.domain.models.world import World


logger = logging.getLogger(__name__)


class ContractService:
    """Negotiation bookkeeping that sits around the issue/sign/decline actions.

    Offers become ``BloodContract`` records on the world; signing and declining
    only change those records. Expiry is reported, never enforced.
    """

    def __init__(self, event_publisher: Optional[Callable[[object], None]] = None) -> None:
        self._event_publisher = event_publisher

    def record_offer(self, world: World, issuer: Character, action: IssueContractAction) -> BloodContract:
        target = world.character_by_id(action.target_id)
        if target is None:
            raise ValueError(f"Unknown contract target: {action.target_id}")
        contract = BloodContract(
            id=f"contract-{uuid.uuid4().hex[:12]}",
            issuer_id=issuer.id,
            issuer_name=issuer.name,
            target_id=target.id,
            target_name=target.name,
            contents=action.contents,
            expiry_turn=world.turn + int(action.expiry),
            signed=False,
            created_turn=world.turn,
        )
        world.active_contracts.append(contract)
        return contract

    def _require(self, world: World, contract_id: str) -> BloodContract:
        for contract in world.active_contracts:
            if contract.id == contract_id:
                return contract
        raise KeyError(contract_id)

    def sign_contract(self, world: World, contract_id: str, signer: Character) -> BloodContract:
        contract = self._require(world, contract_id)
        if contract.target_id != signer.id:
            raise ValueError(f"{signer.name} is not the target of contract {contract_id}")
        if contract.signed:
            return contract
        contract.signed = True
        world.record_events(
            [
                GameEvent(
                    turn=world.turn,
                    kind=EventKind.CONTRACT_SIGNED,
                    description=(
                        f"{signer.name} signed the Blood Contract from {contract.issuer_name}: "
                        f'"{contract.contents}" (expires turn {contract.expiry_turn})'
                    ),
                    actor_id=signer.id,
                    target_id=contract.issuer_id,
                    message=contract.contents,
                    witness_ids=(contract.issuer_id, contract.target_id),
                )
            ]
        )
        logger.info("Contract signed", extra={"contract_id": contract.id, "turn": world.turn})
        if self._event_publisher is not None:
            self._event_publisher(
                ContractSigned(
                    contract_id=contract.id,
                    issuer_id=contract.issuer_id,
                    target_id=contract.target_id,
                    turn=world.turn,
                )
            )
        return contract

    def decline_contract(self, world: World, contract_id: str, decliner: Character) -> BloodContract:
        contract = self._require(world, contract_id)
        if contract.target_id != decliner.id:
            raise ValueError(f"{decliner.name} is not the target of contract {contract_id}")
        if contract.signed:
            raise ValueError(f"Contract {contract_id} is already signed")
        world.active_contracts = [row for row in world.active_contracts if row.id != contract_id]
        world.record_events(
            [
                GameEvent(
                    turn=world.turn,
                    kind=EventKind.CONTRACT_DECLINED,
                    description=f"{decliner.name} declined the Blood Contract from {contract.issuer_name}",
                    actor_id=decliner.id,
                    target_id=contract.issuer_id,
                    witness_ids=(contract.issuer_id, contract.target_id),
                )
            ]
        )
        return contract

    def pending_offers_for(self, world: World, character: Character) -> List[BloodContract]:
        return [row for row in world.active_contracts if row.target_id == character.id and not row.signed]

    def expired_contracts(self, world: World) -> List[BloodContract]:
        return [row for row in world.active_contracts if row.signed and row.is_expired(world.turn)]
