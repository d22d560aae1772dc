from rackplan.editor.history import EditorHistory, HistoryEntry
from rackplan.editor.session import EditorSession
from rackplan.editor.state import EditorElement, EditorRack

__all__ = [
    "EditorHistory",
    "HistoryEntry",
    "EditorSession",
    "EditorElement",
    "EditorRack",
]
