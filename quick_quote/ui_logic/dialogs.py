from __future__ import annotations

"""Request/response protocol for choice prompts.

The core cannot block for a user's choice. Instead an owner asks the
broker to offer a set of named choices; the broker publishes
`SHOW_CONFIRMATION_DIALOG` with a request id, and the dialog collaborator
later publishes `DIALOG_CHOICE_SELECTED {request_id, choice_id}`. The
broker pops the pending request and hands `(choice_id, context)` to the
owner that registered under the request's owner name.

Layout cells are plain dicts:
- `{"type": "button", "text": ..., "choice_id": ..., "colspan": 1}`
- `{"type": "text", "text": ..., "colspan": 2}`
"""

from dataclasses import dataclass, field
import itertools
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import ConfigurationError, DialogCancelled
from ..events import Events

logger = logging.getLogger(__name__)

CANCEL_CHOICE = "cancel"

ChoiceHandler = Callable[[str, Mapping[str, Any]], None]


def button(text: str, choice_id: str, colspan: int = 1, class_name: Optional[str] = None) -> Dict[str, Any]:
    cell: Dict[str, Any] = {"type": "button", "text": text, "choice_id": choice_id, "colspan": colspan}
    if class_name:
        cell["class_name"] = class_name
    return cell


def label(text: str, colspan: int = 1) -> Dict[str, Any]:
    return {"type": "text", "text": text, "colspan": colspan}


def cancel_button(colspan: int = 1) -> Dict[str, Any]:
    return button("Cancel", CANCEL_CHOICE, colspan=colspan, class_name="secondary")


@dataclass(frozen=True)
class DialogRequest:
    request_id: int
    owner: str
    message: str
    layout: Sequence[Sequence[Mapping[str, Any]]]
    position: Optional[str] = None
    context: Mapping[str, Any] = field(default_factory=dict)

    def choice_ids(self) -> List[str]:
        return [cell["choice_id"] for row in self.layout for cell in row if cell.get("type") == "button"]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "message": self.message,
            "layout": [list(row) for row in self.layout],
            "position": self.position,
        }


class DialogBroker:
    """Tracks pending choice prompts and routes the answers to their owners."""

    def __init__(self, event_bus):
        self.event_bus = event_bus
        self._owners: Dict[str, ChoiceHandler] = {}
        self._pending: Dict[int, DialogRequest] = {}
        self._ids = itertools.count(1)

    def register_owner(self, owner: str, handler: ChoiceHandler) -> None:
        if owner in self._owners:
            raise ConfigurationError(f"Dialog owner '{owner}' registered twice")
        self._owners[owner] = handler

    def pending_requests(self) -> List[DialogRequest]:
        return [self._pending[k] for k in sorted(self._pending)]

    def offer(
        self,
        owner: str,
        message: str,
        layout: Sequence[Sequence[Mapping[str, Any]]],
        position: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Publish a choice prompt and remember it until it is answered."""
        if owner not in self._owners:
            raise ConfigurationError(f"Unknown dialog owner '{owner}'")
        request = DialogRequest(
            request_id=next(self._ids),
            owner=owner,
            message=message,
            layout=tuple(tuple(row) for row in layout),
            position=position,
            context=dict(context or {}),
        )
        self._pending[request.request_id] = request
        logger.debug("Dialog %d offered by %s: %s", request.request_id, owner, request.choice_ids())
        self.event_bus.publish(Events.SHOW_CONFIRMATION_DIALOG, request.to_payload())
        return request.request_id

    def handle_choice_selected(self, payload: Mapping[str, Any]) -> None:
        request_id = payload.get("request_id")
        choice_id = payload.get("choice_id")
        request = self._pending.pop(request_id, None)
        if request is None:
            logger.warning("Ignoring choice %r for unknown dialog request %r", choice_id, request_id)
            return
        if choice_id not in request.choice_ids():
            logger.warning("Dialog %d has no choice %r; request dropped", request_id, choice_id)
            return
        try:
            if choice_id == CANCEL_CHOICE:
                raise DialogCancelled(f"dialog {request_id}")
            self._owners[request.owner](choice_id, request.context)
        except DialogCancelled:
            logger.debug("Dialog %d cancelled", request_id)
