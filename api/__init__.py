"""
API 層

- rooms：HTTP endpoints（建立房間、查詢房間快照）
- websocket：即時房間事件（加入、開始、動作、斷線）
"""
