"""아이템 교환 - 가방의 원형 A 1개 → 원형 B n개 (예: 빈 양동이 → 채운 양동이)"""

import logging

from src.core.item.affix import build_static
from src.core.item.inventory import Bag
from src.core.item.models import ItemTemplate

logger = logging.getLogger(__name__)


def exchange_item(
    bag: Bag,
    required: ItemTemplate,
    result: ItemTemplate,
    result_amount: int = 1,
) -> bool:
    """required 1개 제거 후 result를 result_amount개 추가.

    가방이 결과물을 못 받으면 required를 되돌리고 False.
    """
    if not bag.has_at_least(required.template_id, 1):
        logger.info("Exchange failed: no %s in bag", required.template_id)
        return False

    index = next(
        i
        for i, stack in enumerate(bag.slots)
        if not stack.is_empty and stack.item.template_id == required.template_id
    )
    consumed = bag.remove_at(index, 1)

    if not bag.add(build_static(result), max(1, result_amount)):
        bag.replace_at(index, consumed)
        logger.info("Exchange failed: bag full for %s", result.template_id)
        return False

    logger.debug(
        "Exchanged %s → %d x %s",
        required.template_id,
        max(1, result_amount),
        result.template_id,
    )
    return True
