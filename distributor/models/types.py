from typing import Literal, Any

# type aliases for clarity
ByteAddress = str
BigNumber = str
HexHash = str
RPC_Response = dict[Literal["jsonrpc", "id", "result", "error"], Any]
