"""Spotify OAuth and track lookup helpers for the Aguava backend."""
