"""Platform components: routing, sources, destinations, sync engine, temporal."""
