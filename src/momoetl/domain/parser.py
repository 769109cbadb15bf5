"""XML SMS export parser.

Turns an SMS export into ``Candidate`` records. Each ``<sms>`` (or
``<transaction>``) element is one record; fields may be attributes or child
elements:

    <smses>
      <sms ref="TXN-001-2026-001" sender="+256701234567" receiver="+256702345678"
           amount="500.00" date="2026-01-20 14:30:00">Payment for services</sms>
    </smses>

A record that cannot be read becomes a ``ParseFailure`` instead of stopping
the batch. If the document as a whole is not well-formed, record fragments
are located and parsed one by one so the readable ones still get through.
"""

import hashlib
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, Optional, Union

from momoetl.domain.entities import Candidate, ParseFailure

logger = logging.getLogger(__name__)

RECORD_TAGS = ("sms", "transaction")
REQUIRED_FIELDS = ("sender", "receiver", "amount", "date")
MAX_REFERENCE_LENGTH = 50
MAX_FRAGMENT_LENGTH = 2000

# First alias found wins
FIELD_ALIASES = {
    "reference_code": ("ref", "reference", "transaction_code", "txid"),
    "sender": ("sender", "from", "sender_phone"),
    "receiver": ("receiver", "to", "receiver_phone"),
    "amount": ("amount",),
    "date": ("date", "timestamp", "readable_date"),
    "fee": ("fee",),
    "currency": ("currency",),
    "sender_name": ("sender_name",),
    "receiver_name": ("receiver_name",),
    "sender_type": ("sender_type",),
    "receiver_type": ("receiver_type",),
}

_FRAGMENT = re.compile(
    r"<(sms|transaction)\b.*?(?:/>|</\1\s*>)",
    re.DOTALL | re.IGNORECASE,
)
_BODY_REFERENCE = re.compile(
    r"(?:Financial\s+Transaction\s+Id|Transaction\s+Id|TxId|Ref(?:erence)?(?:\s+No\.?)?)"
    r"\s*[:#]\s*([A-Za-z0-9][A-Za-z0-9\-]*)",
    re.IGNORECASE,
)

ParseResult = Union[Candidate, ParseFailure]


def derive_reference_code(sender: str, receiver: str, amount: str, date: str) -> str:
    """Build a stable reference code for a record that carries none.

    The same raw fields always give the same code, so reprocessing an export
    without references is still idempotent.
    """
    key = "|".join(part.strip() for part in (sender, receiver, amount, date))
    return "SMS-" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:20].upper()


class SMSParser:
    """Parser for XML SMS exports."""

    def parse_file(self, path: Union[str, Path]) -> Iterator[ParseResult]:
        """Parse an export file.

        Args:
            path: Path to the XML file

        Yields:
            Candidate or ParseFailure per record, in document order

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        xml_path = Path(path)
        if not xml_path.exists():
            raise FileNotFoundError(f"SMS export not found: {path}")
        text = xml_path.read_text(encoding="utf-8-sig", errors="replace")
        yield from self.parse_string(text)

    def parse_string(self, text: str) -> Iterator[ParseResult]:
        """Parse export text.

        Args:
            text: XML document text

        Yields:
            Candidate or ParseFailure per record, in document order
        """
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            logger.warning("Export is not well-formed XML (%s); scanning record fragments", e)
            yield from self._parse_fragments(text, str(e))
            return

        for offset, element in enumerate(self._record_elements(root)):
            yield self._parse_element(offset, element)

    def _record_elements(self, root: ET.Element) -> list[ET.Element]:
        return [el for el in root.iter() if _local_name(el.tag) in RECORD_TAGS]

    def _parse_fragments(self, text: str, document_error: str) -> Iterator[ParseResult]:
        matches = list(_FRAGMENT.finditer(text))
        if not matches:
            yield ParseFailure(
                offset=0,
                fragment=text[:MAX_FRAGMENT_LENGTH],
                reason=f"Malformed XML document: {document_error}",
            )
            return

        for offset, match in enumerate(matches):
            fragment = match.group(0)
            try:
                element = ET.fromstring(fragment)
            except ET.ParseError as e:
                yield ParseFailure(
                    offset=offset,
                    fragment=fragment[:MAX_FRAGMENT_LENGTH],
                    reason=f"Malformed record: {e}",
                )
                continue
            yield self._parse_element(offset, element)

    def _parse_element(self, offset: int, element: ET.Element) -> ParseResult:
        values = {name: _field(element, aliases) for name, aliases in FIELD_ALIASES.items()}

        missing = [name for name in REQUIRED_FIELDS if not values[name]]
        if missing:
            return ParseFailure(
                offset=offset,
                fragment=_fragment(element),
                reason=f"Missing required field(s): {', '.join(missing)}",
            )

        body = _body(element)
        reference_code = values["reference_code"] or _reference_from_body(body)
        if reference_code is None:
            reference_code = derive_reference_code(
                values["sender"], values["receiver"], values["amount"], values["date"]
            )
        if len(reference_code) > MAX_REFERENCE_LENGTH:
            return ParseFailure(
                offset=offset,
                fragment=_fragment(element),
                reason=f"Reference code longer than {MAX_REFERENCE_LENGTH} characters",
            )

        return Candidate(
            offset=offset,
            reference_code=reference_code,
            sender=values["sender"],
            receiver=values["receiver"],
            amount=values["amount"],
            date=values["date"],
            body=body,
            fee=values["fee"],
            currency=values["currency"],
            sender_name=values["sender_name"],
            receiver_name=values["receiver_name"],
            sender_type=values["sender_type"],
            receiver_type=values["receiver_type"],
        )


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


def _field(element: ET.Element, aliases: tuple[str, ...]) -> Optional[str]:
    for alias in aliases:
        value = element.get(alias)
        if value is not None and value.strip():
            return value.strip()
    for child in element:
        if _local_name(child.tag) in aliases and child.text and child.text.strip():
            return child.text.strip()
    return None


def _body(element: ET.Element) -> str:
    body = element.get("body")
    if body is not None:
        return body.strip()
    for child in element:
        if _local_name(child.tag) == "body":
            return (child.text or "").strip()
    return (element.text or "").strip()


def _reference_from_body(body: str) -> Optional[str]:
    match = _BODY_REFERENCE.search(body)
    return match.group(1) if match else None


def _fragment(element: ET.Element) -> str:
    return ET.tostring(element, encoding="unicode")[:MAX_FRAGMENT_LENGTH]
