"""
Codegrid - Block Programming Puzzle Engine

A deterministic engine for a grid-based coding game. Players assemble
programs from blocks (moves, loops, conditionals, functions) and the
engine provides:
- Program building and validation against a level's block budget
- Step-by-step execution as a stream of trace events
- Goal evaluation with structured failure reasons
- A level catalog with seeded world generation
"""

__version__ = "0.1.0"
