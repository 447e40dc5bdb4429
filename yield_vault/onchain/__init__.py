"""Read pool and lending state from EVM chains over JSON-RPC."""
