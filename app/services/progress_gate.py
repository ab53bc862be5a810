"""
Progress gating over sequential content

Given how many items of a category a user has attempted, decide which items
and which fixed-size topic windows are completed, accessible or locked.
Pure arithmetic on integer ids; recomputed from the latest counter on every call.
"""
from dataclasses import dataclass
from typing import Dict, List, Any

from app.config import settings
from app.services.errors import ValidationError

@dataclass(frozen=True)
class ItemGate:
    item_id: int
    completed: bool
    accessible: bool
    
    @property
    def locked(self) -> bool:
        return not self.accessible

class ProgressGate:
    """
    Gate rules:
    - item n is completed when n <= attempted
    - item n is accessible when n <= attempted + 1 (one item beyond the last completed)
    - topic t covers items (t-1)*P + 1 .. t*P
    - topic t is completed when attempted // P >= t, accessible when t <= attempted // P + 1
    """
    
    def __init__(self, page_size: int = None):
        self.page_size = page_size or settings.QUESTIONS_PER_TOPIC
    
    def _check(self, attempted: int, page_size: int) -> int:
        if attempted is None or attempted < 0:
            raise ValidationError("attempted count must be a non-negative integer")
        if page_size < 1:
            raise ValidationError("page size must be positive")
        return page_size
    
    def _check_id(self, value: int, name: str):
        if value is None or value < 1:
            raise ValidationError(f"{name} must be a positive integer")
    
    def item(self, attempted: int, item_id: int) -> ItemGate:
        self._check(attempted, self.page_size)
        self._check_id(item_id, "item id")
        
        return ItemGate(
            item_id=item_id,
            completed=item_id <= attempted,
            accessible=item_id <= attempted + 1,
        )
    
    def topic_of(self, item_id: int, page_size: int = None) -> int:
        page_size = page_size or self.page_size
        self._check_id(item_id, "item id")
        return (item_id + page_size - 1) // page_size
    
    def position_in_topic(self, item_id: int, page_size: int = None) -> int:
        page_size = page_size or self.page_size
        self._check_id(item_id, "item id")
        return ((item_id - 1) % page_size) + 1
    
    def topic_range(self, topic_id: int, page_size: int = None) -> Dict[str, int]:
        page_size = page_size or self.page_size
        self._check_id(topic_id, "topic id")
        return {
            "start": (topic_id - 1) * page_size + 1,
            "end": topic_id * page_size,
        }
    
    def topic_completed(self, attempted: int, topic_id: int, page_size: int = None) -> bool:
        page_size = self._check(attempted, page_size or self.page_size)
        self._check_id(topic_id, "topic id")
        return attempted // page_size >= topic_id
    
    def topic_accessible(self, attempted: int, topic_id: int, page_size: int = None) -> bool:
        page_size = self._check(attempted, page_size or self.page_size)
        self._check_id(topic_id, "topic id")
        return topic_id <= attempted // page_size + 1
    
    def current_topic(self, attempted: int, page_size: int = None) -> int:
        page_size = self._check(attempted, page_size or self.page_size)
        return attempted // page_size + 1
    
    def topic_progress(self, attempted: int, topic_id: int, page_size: int = None) -> Dict[str, Any]:
        """How many of a topic's items are attempted, capped at the topic size"""
        page_size = self._check(attempted, page_size or self.page_size)
        bounds = self.topic_range(topic_id, page_size)
        
        done = min(max(attempted - bounds["start"] + 1, 0), page_size)
        
        return {
            "attempted": done,
            "total": page_size,
            "percentage": round(done / page_size * 100),
        }
    
    def topic_grid(
        self,
        attempted: int,
        topic_id: int,
        last_item_id: int = None,
        page_size: int = None
    ) -> List[Dict[str, Any]]:
        """
        Per-item gate flags for one topic window
        
        Args:
            attempted: user's attempted count for the category
            topic_id: 1-based topic window
            last_item_id: highest existing item id; the grid stops there
            page_size: items per topic (defaults to the configured size)
        """
        page_size = self._check(attempted, page_size or self.page_size)
        bounds = self.topic_range(topic_id, page_size)
        end = bounds["end"] if last_item_id is None else min(bounds["end"], last_item_id)
        
        grid = []
        for item_id in range(bounds["start"], end + 1):
            gate = self.item(attempted, item_id)
            grid.append({
                "item_id": item_id,
                "position_in_topic": self.position_in_topic(item_id, page_size),
                "completed": gate.completed,
                "accessible": gate.accessible,
                "locked": gate.locked,
            })
        
        return grid

# Global instance
progress_gate = ProgressGate()
