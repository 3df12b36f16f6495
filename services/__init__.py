"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- DeckService：建立與洗牌
- ScoringService：手牌點數、回合 / 比賽贏家
- TurnService：輪替順序與回合結算判斷
- NamingService：房間代碼與玩家名稱
- ViewService：公開 / 私人快照
"""
