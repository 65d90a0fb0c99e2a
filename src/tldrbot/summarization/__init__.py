"""Message-window summarization pipeline."""

from .content import Element, Other, Text, encode_content, flatten, parse_content
from .pipeline import InvocationContext, PipelineState, TldrPipeline
from .prompt import FlattenedLine, SummaryPrompt, assemble_prompt
from .reply import GroupedReply, compose_reply
from .summarizer import GenerationError, Summarizer
from .window import MessageStore, SelectionCriteria, StoredMessage, select_window

__all__ = [
    "Element",
    "Other",
    "Text",
    "encode_content",
    "flatten",
    "parse_content",
    "InvocationContext",
    "PipelineState",
    "TldrPipeline",
    "FlattenedLine",
    "SummaryPrompt",
    "assemble_prompt",
    "GroupedReply",
    "compose_reply",
    "GenerationError",
    "Summarizer",
    "MessageStore",
    "SelectionCriteria",
    "StoredMessage",
    "select_window",
]
