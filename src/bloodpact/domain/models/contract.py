from dataclasses import dataclass


MIN_CONTRACT_EXPIRY = 1
MAX_CONTRACT_EXPIRY = 20


@dataclass
class BloodContract:
    id: str
    issuer_id: str
    issuer_name: str
    target_id: str
    target_name: str
    contents: str
    expiry_turn: int
    signed: bool = False
    created_turn: int = 0

    def involves(self, character_id: str) -> bool:
        return character_id in (self.issuer_id, self.target_id)

    def is_expired(self, turn: int) -> bool:
        return turn > self.expiry_turn
