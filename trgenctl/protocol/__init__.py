"""Protocol layer: instruction words, CRC, capability word, framing and acks."""

from trgenctl.protocol.capabilities import decode_capabilities, default_memory_length
from trgenctl.protocol.checksum import crc32
from trgenctl.protocol.framing import Command, build_frame, parse_ack, program_command_id
