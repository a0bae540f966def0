"""Content risk detection backend"""
