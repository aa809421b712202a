"""Chain registry, Relay bridge client and models."""
