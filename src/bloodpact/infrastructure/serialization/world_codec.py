"""JSON form of ``World`` used by snapshots and world files.

The layout mirrors the dataclasses. Tagged variants carry a ``type`` field and
each character's map memory is written as ``[["x,y", {...}], ...]`` pairs.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from bloodpact.domain.events import EventKind, GameEvent, SoundEffect
from bloodpact.domain.models.character import Character, ReasoningEffort
from bloodpact.domain.models.contract import BloodContract
from bloodpact.domain.models.effect import (
    ApplyEffectAction,
    CustomAction,
    DamageAction,
    Effect,
    EffectAction,
    EffectTrigger,
    HealAction,
    MessageAction,
    ModifyStatAction,
    StatName,
    StatOperation,
    TriggerPoint,
)
from bloodpact.domain.models.feature import ChestFeature, DoorFeature, Feature, TrapFeature
from bloodpact.domain.models.item import Item, ItemType
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.tile import FeatureMemory, TerrainType, Tile, TileMemory
from bloodpact.domain.models.world import Room, RoomBounds, World


class WorldFormatError(ValueError):
    pass


def _position_to_dict(position: Optional[Position]) -> Optional[Dict[str, int]]:
    if position is None:
        return None
    return {"x": position.x, "y": position.y}


def _position_from_dict(payload: Any) -> Optional[Position]:
    if payload is None:
        return None
    try:
        return Position(int(payload["x"]), int(payload["y"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise WorldFormatError(f"Invalid position: {payload!r}") from exc


# effects


def effect_action_to_dict(action: EffectAction) -> Dict[str, Any]:
    if isinstance(action, (DamageAction, HealAction)):
        return {"type": action.kind, "amount": action.amount}
    if isinstance(action, ModifyStatAction):
        return {
            "type": action.kind,
            "stat": action.stat.value,
            "operation": action.operation.value,
            "value": action.value,
        }
    if isinstance(action, MessageAction):
        return {"type": action.kind, "text": action.text}
    if isinstance(action, CustomAction):
        return {"type": action.kind, "prompt": action.prompt}
    if isinstance(action, ApplyEffectAction):
        return {"type": action.kind, "effect": effect_to_dict(action.effect)}
    raise WorldFormatError(f"Unsupported effect action: {type(action).__name__}")


def effect_action_from_dict(payload: Dict[str, Any]) -> EffectAction:
    kind = str(payload.get("type", ""))
    if kind == "damage":
        return DamageAction(amount=int(payload["amount"]))
    if kind == "heal":
        return HealAction(amount=int(payload["amount"]))
    if kind == "modify_stat":
        return ModifyStatAction(
            stat=StatName(payload["stat"]),
            operation=StatOperation(payload["operation"]),
            value=float(payload["value"]),
        )
    if kind == "message":
        return MessageAction(text=str(payload.get("text", "")))
    if kind == "custom":
        return CustomAction(prompt=str(payload.get("prompt", "")))
    if kind == "apply_effect":
        return ApplyEffectAction(effect=effect_from_dict(payload["effect"]))
    raise WorldFormatError(f"Unknown effect action type: {kind!r}")


def effect_to_dict(effect: Effect) -> Dict[str, Any]:
    return {
        "id": effect.id,
        "name": effect.name,
        "sourceId": effect.source_id,
        "duration": effect.duration,
        "preventsMovement": effect.prevents_movement,
        "triggers": [
            {"on": trigger.on.value, "actions": [effect_action_to_dict(action) for action in trigger.actions]}
            for trigger in effect.triggers
        ],
    }


def effect_from_dict(payload: Dict[str, Any]) -> Effect:
    return Effect(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        source_id=payload.get("sourceId"),
        duration=int(payload.get("duration", -1)),
        prevents_movement=bool(payload.get("preventsMovement", False)),
        triggers=[
            EffectTrigger(
                on=TriggerPoint(row["on"]),
                actions=[effect_action_from_dict(action) for action in row.get("actions", [])],
            )
            for row in payload.get("triggers", [])
        ],
    )


# items and features


def contract_to_dict(contract: BloodContract) -> Dict[str, Any]:
    return {
        "id": contract.id,
        "issuerId": contract.issuer_id,
        "issuerName": contract.issuer_name,
        "targetId": contract.target_id,
        "targetName": contract.target_name,
        "contents": contract.contents,
        "expiryTurn": contract.expiry_turn,
        "signed": contract.signed,
        "createdTurn": contract.created_turn,
    }


def contract_from_dict(payload: Dict[str, Any]) -> BloodContract:
    return BloodContract(
        id=str(payload["id"]),
        issuer_id=str(payload["issuerId"]),
        issuer_name=str(payload.get("issuerName", "")),
        target_id=str(payload["targetId"]),
        target_name=str(payload.get("targetName", "")),
        contents=str(payload.get("contents", "")),
        expiry_turn=int(payload.get("expiryTurn", 0)),
        signed=bool(payload.get("signed", False)),
        created_turn=int(payload.get("createdTurn", 0)),
    )


def item_to_dict(item: Item) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"id": item.id, "name": item.name, "type": item.type.value}
    if item.damage is not None:
        payload["damage"] = item.damage
    if item.armor is not None:
        payload["armor"] = item.armor
    if item.use_effect is not None:
        payload["useEffect"] = effect_action_to_dict(item.use_effect)
    if item.trap_effect is not None:
        payload["trapEffect"] = effect_to_dict(item.trap_effect)
    if item.unlocks_feature_id is not None:
        payload["unlocksFeatureId"] = item.unlocks_feature_id
    if item.contract is not None:
        payload["contract"] = contract_to_dict(item.contract)
    return payload


def item_from_dict(payload: Dict[str, Any]) -> Item:
    return Item(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        type=ItemType.normalize(payload.get("type")),
        damage=payload.get("damage"),
        armor=payload.get("armor"),
        use_effect=effect_action_from_dict(payload["useEffect"]) if payload.get("useEffect") else None,
        trap_effect=effect_from_dict(payload["trapEffect"]) if payload.get("trapEffect") else None,
        unlocks_feature_id=payload.get("unlocksFeatureId"),
        contract=contract_from_dict(payload["contract"]) if payload.get("contract") else None,
    )


def feature_to_dict(feature: Feature) -> Dict[str, Any]:
    if isinstance(feature, DoorFeature):
        return {
            "type": "door",
            "id": feature.id,
            "name": feature.name,
            "locked": feature.locked,
            "open": feature.open,
            "keyId": feature.key_id,
        }
    if isinstance(feature, ChestFeature):
        return {
            "type": "chest",
            "id": feature.id,
            "name": feature.name,
            "searched": feature.searched,
            "contents": [item_to_dict(item) for item in feature.contents],
        }
    if isinstance(feature, TrapFeature):
        return {
            "type": "trap",
            "id": feature.id,
            "name": feature.name,
            "ownerId": feature.owner_id,
            "witnessIds": list(feature.witness_ids),
            "appliesEffect": effect_to_dict(feature.applies_effect),
            "triggered": feature.triggered,
        }
    raise WorldFormatError(f"Unsupported feature: {type(feature).__name__}")


def feature_from_dict(payload: Dict[str, Any]) -> Feature:
    kind = str(payload.get("type", ""))
    if kind == "door":
        return DoorFeature(
            id=str(payload["id"]),
            name=str(payload.get("name", "Door")),
            locked=bool(payload.get("locked", False)),
            open=bool(payload.get("open", False)),
            key_id=payload.get("keyId"),
        )
    if kind == "chest":
        return ChestFeature(
            id=str(payload["id"]),
            name=str(payload.get("name", "Chest")),
            searched=bool(payload.get("searched", False)),
            contents=[item_from_dict(row) for row in payload.get("contents", [])],
        )
    if kind == "trap":
        return TrapFeature(
            id=str(payload["id"]),
            name=str(payload.get("name", "Trap")),
            owner_id=str(payload["ownerId"]),
            witness_ids=[str(row) for row in payload.get("witnessIds", [])],
            applies_effect=effect_from_dict(payload["appliesEffect"]),
            triggered=bool(payload.get("triggered", False)),
        )
    raise WorldFormatError(f"Unknown feature type: {kind!r}")


# tiles and characters


def tile_to_dict(tile: Tile) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"type": tile.terrain.value, "items": [item_to_dict(item) for item in tile.items]}
    if tile.feature is not None:
        payload["feature"] = feature_to_dict(tile.feature)
    if tile.room_id is not None:
        payload["roomId"] = tile.room_id
    return payload


def tile_from_dict(payload: Dict[str, Any]) -> Tile:
    try:
        terrain = TerrainType(payload.get("type", "ground"))
    except ValueError as exc:
        raise WorldFormatError(f"Unknown terrain: {payload.get('type')!r}") from exc
    return Tile(
        terrain=terrain,
        items=[item_from_dict(row) for row in payload.get("items", [])],
        feature=feature_from_dict(payload["feature"]) if payload.get("feature") else None,
        room_id=payload.get("roomId"),
    )


def tile_memory_to_dict(memory: TileMemory) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"type": memory.terrain.value, "lastSeenTurn": memory.last_seen_turn}
    if memory.items is not None:
        payload["items"] = list(memory.items)
    if memory.character_name is not None:
        payload["characterName"] = memory.character_name
    if memory.character_alive is not None:
        payload["characterAlive"] = memory.character_alive
    if memory.feature is not None:
        payload["feature"] = {"type": memory.feature.kind, "name": memory.feature.name}
    return payload


def tile_memory_from_dict(payload: Dict[str, Any]) -> TileMemory:
    feature = payload.get("feature")
    return TileMemory(
        terrain=TerrainType(payload.get("type", "ground")),
        last_seen_turn=int(payload.get("lastSeenTurn", 0)),
        items=list(payload["items"]) if payload.get("items") is not None else None,
        character_name=payload.get("characterName"),
        character_alive=payload.get("characterAlive"),
        feature=FeatureMemory(kind=str(feature["type"]), name=str(feature.get("name", ""))) if feature else None,
    )


def character_to_dict(character: Character) -> Dict[str, Any]:
    return {
        "id": character.id,
        "name": character.name,
        "gender": character.gender,
        "position": _position_to_dict(character.position),
        "hp": character.hp,
        "maxHp": character.max_hp,
        "inventory": [item_to_dict(item) for item in character.inventory],
        "equippedWeaponId": character.equipped_weapon.id if character.equipped_weapon is not None else None,
        "equippedClothingId": character.equipped_clothing.id if character.equipped_clothing is not None else None,
        "alive": character.alive,
        "personalityPrompt": character.personality_prompt,
        "movementRange": character.movement_range,
        "viewDistance": character.view_distance,
        "effects": [effect_to_dict(effect) for effect in character.effects],
        "mapMemory": [
            [position.key(), tile_memory_to_dict(memory)] for position, memory in character.map_memory.items()
        ],
        "aiModel": character.ai_model,
        "reasoningEffort": character.reasoning_effort.value,
    }


def character_from_dict(payload: Dict[str, Any]) -> Character:
    inventory = [item_from_dict(row) for row in payload.get("inventory", [])]
    by_id = {item.id: item for item in inventory}
    position = _position_from_dict(payload.get("position"))
    if position is None:
        raise WorldFormatError(f"Character {payload.get('id')!r} has no position")
    memory_rows = payload.get("mapMemory", [])
    if isinstance(memory_rows, dict):
        memory_rows = list(memory_rows.items())
    return Character(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        gender=str(payload.get("gender", "unspecified")),
        position=position,
        hp=int(payload.get("hp", 10)),
        max_hp=int(payload.get("maxHp", 10)),
        inventory=inventory,
        equipped_weapon=by_id.get(payload.get("equippedWeaponId") or ""),
        equipped_clothing=by_id.get(payload.get("equippedClothingId") or ""),
        alive=bool(payload.get("alive", True)),
        personality_prompt=str(payload.get("personalityPrompt", "")),
        movement_range=int(payload.get("movementRange", 4)),
        view_distance=int(payload.get("viewDistance", 8)),
        effects=[effect_from_dict(row) for row in payload.get("effects", [])],
        map_memory={Position.from_key(key): tile_memory_from_dict(value) for key, value in memory_rows},
        ai_model=str(payload.get("aiModel", "")),
        reasoning_effort=ReasoningEffort.normalize(payload.get("reasoningEffort")),
    )


# events and world


def event_to_dict(event: GameEvent) -> Dict[str, Any]:
    return {
        "turn": event.turn,
        "order": event.order,
        "type": event.kind.value,
        "actorId": event.actor_id,
        "targetId": event.target_id,
        "itemId": event.item_id,
        "position": _position_to_dict(event.position),
        "damage": event.damage,
        "message": event.message,
        "description": event.description,
        "sound": event.sound.value if event.sound is not None else None,
        "witnessIds": list(event.witness_ids),
    }


def event_from_dict(payload: Dict[str, Any]) -> GameEvent:
    sound = payload.get("sound")
    return GameEvent(
        turn=int(payload.get("turn", 0)),
        order=int(payload.get("order", 0)),
        kind=EventKind(payload["type"]),
        actor_id=payload.get("actorId"),
        target_id=payload.get("targetId"),
        item_id=payload.get("itemId"),
        position=_position_from_dict(payload.get("position")),
        damage=payload.get("damage"),
        message=payload.get("message"),
        description=str(payload.get("description", "")),
        sound=SoundEffect(sound) if sound else None,
        witness_ids=tuple(str(row) for row in payload.get("witnessIds", [])),
    )


def world_to_dict(world: World) -> Dict[str, Any]:
    return {
        "width": world.width,
        "height": world.height,
        "turn": world.turn,
        "tiles": [[tile_to_dict(tile) for tile in row] for row in world.tiles],
        "rooms": [
            {
                "id": room.id,
                "name": room.name,
                "bounds": {
                    "minX": room.bounds.min_x,
                    "minY": room.bounds.min_y,
                    "maxX": room.bounds.max_x,
                    "maxY": room.bounds.max_y,
                },
            }
            for room in world.rooms
        ],
        "characters": [character_to_dict(character) for character in world.characters],
        "events": [event_to_dict(event) for event in world.events],
        "activeContracts": [contract_to_dict(contract) for contract in world.active_contracts],
    }


def world_from_dict(payload: Dict[str, Any]) -> World:
    try:
        width = int(payload["width"])
        height = int(payload["height"])
        raw_tiles: List[List[Dict[str, Any]]] = payload["tiles"]
    except (KeyError, TypeError, ValueError) as exc:
        raise WorldFormatError("World payload needs width, height and tiles") from exc
    if len(raw_tiles) != height or any(len(row) != width for row in raw_tiles):
        raise WorldFormatError(f"Tile grid does not match {width}x{height}")

    rooms = [
        Room(
            id=str(row["id"]),
            name=str(row.get("name", "")),
            bounds=RoomBounds(
                min_x=int(row["bounds"]["minX"]),
                min_y=int(row["bounds"]["minY"]),
                max_x=int(row["bounds"]["maxX"]),
                max_y=int(row["bounds"]["maxY"]),
            ),
        )
        for row in payload.get("rooms", [])
    ]
    return World(
        width=width,
        height=height,
        tiles=[[tile_from_dict(tile) for tile in row] for row in raw_tiles],
        rooms=rooms,
        characters=[character_from_dict(row) for row in payload.get("characters", [])],
        turn=int(payload.get("turn", 0)),
        events=[event_from_dict(row) for row in payload.get("events", [])],
        active_contracts=[contract_from_dict(row) for row in payload.get("activeContracts", [])],
    )


def dumps_world(world: World, *, indent: Optional[int] = None) -> str:
    return json.dumps(world_to_dict(world), indent=indent)


def loads_world(text: str) -> World:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WorldFormatError(f"World file is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise WorldFormatError("World file must contain a JSON object")
    return world_from_dict(payload)
