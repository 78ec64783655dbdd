"""아이템 경제 Core - 순수 Python, DB 무관"""

from .models import (
    AffixKind,
    EquipSlot,
    ItemCategory,
    ItemInstance,
    ItemStack,
    ItemTemplate,
    LootProfile,
    Rarity,
)
from .registry import ItemCatalog
from .inventory import Bag
from .equipment import EquipmentSet
from .wallet import Wallet
from .loot import LootContainer
from .transfer import TransferCoordinator, EquipResult

__all__ = [
    "AffixKind",
    "EquipSlot",
    "ItemCategory",
    "ItemInstance",
    "ItemStack",
    "ItemTemplate",
    "LootProfile",
    "Rarity",
    "ItemCatalog",
    "Bag",
    "EquipmentSet",
    "Wallet",
    "LootContainer",
    "TransferCoordinator",
    "EquipResult",
]
