# hl7mask/policies.py
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple


@dataclass(frozen=True)
class FieldRule:
    index: int                       # 1-based field number, equals position in the split list
    component: Optional[int] = None  # 1-based; None masks every component
    keep_first_repeat: bool = False  # leave occurrence #1 untouched, mask the rest


@dataclass(frozen=True)
class MaskingPolicy:
    rules: Tuple[FieldRule, ...] = ()
    mask_from: Optional[int] = None  # mask every field from this index to the end

    def field_indexes(self):
        return [rule.index for rule in self.rules]


def full_mask(*indexes):
    return tuple(FieldRule(i) for i in indexes)


# PID-3 keeps the primary identifier (first repeat), everything else in the list goes.
PID_POLICY = MaskingPolicy(
    rules=(FieldRule(3, keep_first_repeat=True),) + full_mask(
        4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17,
        19, 20, 21, 22, 23, 26, 27, 28,
    ),
)

NK1_POLICY = MaskingPolicy(
    rules=full_mask(
        2, 4, 5, 6, 7, 10, 11, 12, 13, 14, 15, 16, 19, 20,
        25, 26, 27, 28, 29, 30, 31, 32, 33, 35, 37, 38,
    ),
)

# Insurance / guarantor: keep set ID (field 1), mask the rest
INSURANCE_POLICY = MaskingPolicy(mask_from=2)

MASKING_POLICIES = MappingProxyType({
    "PID": PID_POLICY,
    "NK1": NK1_POLICY,
    "IN1": INSURANCE_POLICY,
    "IN2": INSURANCE_POLICY,
    "GT1": INSURANCE_POLICY,
})
