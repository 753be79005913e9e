"""Shared utilities used across filmfolio subpackages."""
