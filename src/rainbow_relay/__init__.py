"""Relay of NEAR light-client blocks to a verifier contract on Ethereum."""
