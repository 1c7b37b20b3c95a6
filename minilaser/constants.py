# Device field, in device units.
DEVICE_WIDTH = 1024
DEVICE_HEIGHT = 1024

MAX_DWELL = 255

# Motion buffers are 256 moves of 4 bytes each.
MOVE_SIZE = 4
MOVES_PER_PACKET = 256
PACKET_SIZE = MOVE_SIZE * MOVES_PER_PACKET

# Control commands.
CMD_HOME = "$40"
CMD_RESET_ORIGIN = "$42"
CMD_FAN = "$10"
CMD_PRINT_ORDER = "$30"
CMD_END_PRINT = "$33"
CMD_LASER_POWER = "$8"
CMD_ENGRAVING_DEPTH = "$9"
CMD_START_PREVIEW = "$20"
CMD_STOP_PREVIEW = "$25"

FAN_ON = 1000
FAN_OFF = 0
ORDER_FAN = "P2"
ORDER_NO_FAN = "P0"

# Tokens found in device responses.
TOKEN_CONNECT = "connect"
TOKEN_BUFFER_OK = "B1"
TOKEN_PRINT_FINISHED = "F22"
