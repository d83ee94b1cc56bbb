"""Chat data stream: wire format, writer, turn loop and client reducer."""

from app.streaming.data_stream import DataStreamWriter, artifact_generation, create_data_stream
from app.streaming.protocol import DataType, PartType, StreamPart
from app.streaming.reducer import ClientState, StreamReducer

__all__ = [
    "ClientState",
    "DataStreamWriter",
    "DataType",
    "PartType",
    "StreamPart",
    "StreamReducer",
    "artifact_generation",
    "create_data_stream",
]
