"""OFX document writer.

Renders a canonical :class:`Statement` as an OFX 2 (XML) document::

    <OFX>
      <CREDITCARDMSGSRSV1>
        <CCSTMTTRNRS>
          <TRNUID/> <STATUS/>
          <CCSTMTRS>
            <CURDEF/> <BANKACCTFROM/> <BANKTRANLIST/>
          </CCSTMTRS>
        </CCSTMTTRNRS>
      </CREDITCARDMSGSRSV1>
    </OFX>
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Tuple

from ..exceptions import SerializationError
from ..models.core import Statement, Transaction


logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
OFX_HEADER = '<?OFX OFXHEADER="200" VERSION="211" SECURITY="NONE" OLDFILEUID="NONE" NEWFILEUID="NONE"?>\n'

TRANSACTION_UID = "transaction_id"
STATUS_CODE = "0"
STATUS_SEVERITY = "INFO"

# message set name -> (message set, transaction response, statement response)
MESSAGE_SETS: Dict[str, Tuple[str, str, str]] = {
    "credit_card": ("CREDITCARDMSGSRSV1", "CCSTMTTRNRS", "CCSTMTRS"),
    "bank": ("BANKMSGSRSV1", "STMTTRNRS", "STMTRS"),
}


def _text_element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = text
    return element


class OFXWriter:
    """Serializes statements into OFX text"""

    def __init__(self, message_set: str = "credit_card", indent: bool = True):
        if message_set not in MESSAGE_SETS:
            raise ValueError(
                f"Unknown message set: {message_set}. Expected one of {sorted(MESSAGE_SETS)}"
            )
        self.message_set = message_set
        self.indent = indent

    def build(self, statement: Statement) -> ET.Element:
        """Build the element tree for a statement"""
        message_set_tag, response_tag, statement_tag = MESSAGE_SETS[self.message_set]

        root = ET.Element("OFX")
        message_set = ET.SubElement(root, message_set_tag)
        response = ET.SubElement(message_set, response_tag)

        _text_element(response, "TRNUID", TRANSACTION_UID)
        status = ET.SubElement(response, "STATUS")
        _text_element(status, "CODE", STATUS_CODE)
        _text_element(status, "SEVERITY", STATUS_SEVERITY)

        body = ET.SubElement(response, statement_tag)
        _text_element(body, "CURDEF", statement.currency)
        account = ET.SubElement(body, "BANKACCTFROM")
        _text_element(account, "BANKID", statement.account_label)

        transaction_list = ET.SubElement(body, "BANKTRANLIST")
        _text_element(transaction_list, "DTSTART", statement.start)
        _text_element(transaction_list, "DTEND", statement.end)
        for transaction in statement.transactions:
            self._add_transaction(transaction_list, transaction)

        return root

    def _add_transaction(self, parent: ET.Element, transaction: Transaction) -> None:
        element = ET.SubElement(parent, "STMTTRN")
        _text_element(element, "TRNTYPE", transaction.kind.value)
        _text_element(element, "DTPOSTED", transaction.posted)
        _text_element(element, "TRNAMT", transaction.formatted_amount)
        _text_element(element, "FITID", transaction.id)
        _text_element(element, "MEMO", transaction.description)

    def serialize(self, statement: Statement) -> str:
        """Render a statement as an OFX document.

        Raises:
            SerializationError: If the document cannot be rendered. No
                partial output is returned.
        """
        try:
            root = self.build(statement)
            if self.indent:
                ET.indent(root, space="  ")
            document = ET.tostring(root, encoding="unicode")
        except (AttributeError, TypeError, ValueError) as e:
            raise SerializationError(f"Failed to render OFX document: {e}") from e

        logger.debug(
            "Rendered OFX for %s with %d transactions",
            statement.account_label, len(statement.transactions)
        )
        return XML_DECLARATION + OFX_HEADER + document + "\n"


def serialize(statement: Statement) -> str:
    """Render a statement with the default credit card message set"""
    return OFXWriter().serialize(statement)
