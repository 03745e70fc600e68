"""Simple Event Bus / Observer for inventory change notifications.

Event names (see utilities.constants):
  ledger.changed -> payload {"action": str, "film_ids": [str]}
  loaded_films.changed -> payload {"action": str, "loaded_id": str, "film_id": str}

Subscribers are callables taking (event_name, payload). Each service owns its
own bus; there is no module-level instance.
"""
from __future__ import annotations
from collections import defaultdict
from typing import Callable, Any, Dict, List
import logging

from filmstock.utilities.constants import LEDGER_CHANGED, LOADED_FILMS_CHANGED

logger = logging.getLogger(__name__)


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any = None):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception as e:
				# A failing subscriber must not undo a committed mutation
				logger.error(f"Error delivering {event_name} to {cb}: {e}")

	def subscriber_count(self, event_name: str) -> int:
		return len(self._subscribers.get(event_name, []))


__all__ = ['EventBus', 'LEDGER_CHANGED', 'LOADED_FILMS_CHANGED']
