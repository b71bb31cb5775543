"""Pure domain model for token sales and transfer policies."""
