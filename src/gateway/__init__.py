"""Generation transport: the generate-text service and the client gateways that call it."""
