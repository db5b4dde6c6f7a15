# hl7mask/hl7_utils.py
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .policies import MASKING_POLICIES

logger = logging.getLogger(__name__)

MASK_CHAR = "*"
SEGMENT_TERMINATOR = "\r"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class DelimiterSet:
    field: str = "|"
    component: str = "^"
    repeat: str = "~"
    escape: str = "\\"
    subcomponent: str = "&"

    def as_dict(self) -> dict:
        return {
            "FIELD": self.field,
            "COMPONENT": self.component,
            "REPEAT": self.repeat,
            "ESCAPE": self.escape,
            "SUBCOMPONENT": self.subcomponent,
        }

    def is_distinct(self) -> bool:
        chars = (self.field, self.component, self.repeat, self.escape, self.subcomponent)
        return all(len(c) == 1 for c in chars) and len(set(chars)) == 5


DEFAULT_DELIMITERS = DelimiterSet()


def split_lines(hl7_text: str):
    """
    Split message text into segment lines on \\r\\n, \\n or \\r.
    A trailing terminator does not produce an extra empty segment.
    """
    if not hl7_text:
        return []
    lines = _LINE_BREAK.split(hl7_text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def resolve_delimiters(hl7_text: str) -> DelimiterSet:
    """
    Read the delimiters from the first MSH segment found in the text.

    MSH|^~\\&|...
       ^^^^^ field, component, repeat, escape, subcomponent

    Missing positions (short header) fall back to the HL7 defaults.
    Never raises.
    """
    if not isinstance(hl7_text, str):
        return DEFAULT_DELIMITERS

    header = None
    for line in split_lines(hl7_text):
        if line[:3].upper() == "MSH":
            header = line[3:8]
            break

    if header is None:
        logger.debug("No MSH segment found, using default delimiters")
        return DEFAULT_DELIMITERS

    defaults = (
        DEFAULT_DELIMITERS.field,
        DEFAULT_DELIMITERS.component,
        DEFAULT_DELIMITERS.repeat,
        DEFAULT_DELIMITERS.escape,
        DEFAULT_DELIMITERS.subcomponent,
    )
    chars = [header[i] if i < len(header) else defaults[i] for i in range(5)]
    delims = DelimiterSet(*chars)

    if len(header) < 5:
        logger.debug("Short MSH header (%d delimiter chars), defaults used for the rest", len(header))

    if not delims.is_distinct():
        # keep the declared field separator if the rest can be defaults
        fallback = DelimiterSet(field=chars[0])
        if fallback.is_distinct():
            logger.warning("MSH declares duplicate delimiters %r, keeping field separator %r", "".join(chars), chars[0])
            return fallback
        logger.error("MSH declares duplicate delimiters %r, using default delimiters", "".join(chars))
        return DEFAULT_DELIMITERS

    return delims


def _mask_chars(value: str) -> str:
    return MASK_CHAR * len(value)


def mask_component(field: str, delims: DelimiterSet, component: Optional[int] = None) -> str:
    """
    Mask one component (1-based) of a single field occurrence, or every
    component when no index is given. An out of range index returns the
    field unchanged.
    """
    components = field.split(delims.component)

    if component is None:
        return delims.component.join(_mask_chars(c) for c in components)

    if not 1 <= component <= len(components):
        return field

    masked = list(components)
    masked[component - 1] = _mask_chars(masked[component - 1])
    return delims.component.join(masked)


def mask_field(field: str, delims: DelimiterSet, component: Optional[int] = None) -> str:
    # every repeat is masked the same way
    occurrences = field.split(delims.repeat)
    return delims.repeat.join(mask_component(occ, delims, component) for occ in occurrences)


def _mask_all_but_first_repeat(field: str, delims: DelimiterSet, component: Optional[int] = None) -> str:
    occurrences = field.split(delims.repeat)
    masked = occurrences[:1] + [mask_component(occ, delims, component) for occ in occurrences[1:]]
    return delims.repeat.join(masked)


def mask_segment(fields, delims: DelimiterSet, policies=MASKING_POLICIES):
    """
    Return a masked copy of a split segment. fields[0] is the segment tag,
    fields[n] is field n. The input list is not modified.
    """
    if not fields:
        return []

    policy = policies.get(fields[0].upper())
    masked = list(fields)
    if policy is None:
        return masked

    # safe set: only fields that are actually there, never the tag
    for rule in policy.rules:
        if not 1 <= rule.index < len(masked):
            continue
        if rule.keep_first_repeat:
            masked[rule.index] = _mask_all_but_first_repeat(masked[rule.index], delims, rule.component)
        else:
            masked[rule.index] = mask_field(masked[rule.index], delims, rule.component)

    if policy.mask_from is not None:
        for index in range(max(policy.mask_from, 1), len(masked)):
            masked[index] = mask_field(masked[index], delims)

    return masked


def mask_message(hl7_text: str, policies=MASKING_POLICIES) -> str:
    """
    Mask identifying fields in an HL7 v2 message.
    Every output segment is terminated with \\r.
    """
    return _mask_lines(hl7_text, policies)["masked_hl7"]


def _mask_lines(hl7_text: str, policies=MASKING_POLICIES) -> dict:
    delims = resolve_delimiters(hl7_text)

    out = []
    message_type = ""
    masked_segments = 0
    masked_fields = 0
    lines = split_lines(hl7_text)

    for line in lines:
        fields = line.split(delims.field)

        # MSH-9, MSH-1 is the separator itself so it sits at fields[8]
        if not message_type and fields[0].upper() == "MSH" and len(fields) > 8:
            message_type = fields[8]

        masked = mask_segment(fields, delims, policies)
        changed = sum(1 for old, new in zip(fields, masked) if old != new)
        if changed:
            masked_segments += 1
            masked_fields += changed

        out.append(delims.field.join(masked) + SEGMENT_TERMINATOR)

    return {
        "masked_hl7": "".join(out),
        "message_type": message_type,
        "delimiters": delims.as_dict(),
        "segment_count": len(lines),
        "masked_segment_count": masked_segments,
        "masked_field_count": masked_fields,
    }


def mask_hl7_message(hl7_text) -> dict:
    """
    Entry point for callers without their own exception handling.
    Always returns a dict; problems come back under the "error" key.
    """
    if hl7_text is None:
        return {"error": "No HL7 message supplied."}
    if not isinstance(hl7_text, str):
        return {"error": f"HL7 message must be text, got {type(hl7_text).__name__}."}

    result = _mask_lines(hl7_text)
    logger.info(
        "Masked HL7 message type=%s segments=%d masked_segments=%d masked_fields=%d",
        result["message_type"] or "-",
        result["segment_count"],
        result["masked_segment_count"],
        result["masked_field_count"],
    )
    return result
