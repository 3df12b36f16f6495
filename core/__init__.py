"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- 狀態機：集中管理單一房間的所有狀態轉換
- Registry：管理 Room 的生命週期
- Manager：序列化房間事件並送出結果
- Locks：並發控制工具
"""
