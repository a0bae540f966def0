"""Detection, persistence and aggregation services"""
