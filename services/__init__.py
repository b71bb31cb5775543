"""Application services: sale settlement and transfer policy."""
