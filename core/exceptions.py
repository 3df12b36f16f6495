"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API / WebSocket 層統一處理。
RoomError 底下的異常都是「房間範圍內、可恢復」的錯誤：
只通知發出請求的連線，不會讓 process 掛掉。
"""


class BlackjackException(Exception):
    """所有遊戲異常的基類"""
    pass


class RoomError(BlackjackException):
    """回報給玩家的房間錯誤（訊息會直接送到前端）"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ============ Room 相關異常 ============

class RoomNotFound(RoomError):
    """房間不存在"""
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__("room not found")


class InvalidPlayerCount(RoomError):
    """玩家數量不足（至少需要 1 位玩家）"""
    def __init__(self):
        super().__init__("need at least one player")


# ============ 狀態轉換異常 ============

class InvalidStateTransition(RoomError):
    """非法的狀態轉換（例如：遊戲進行中又要開始）"""
    pass


# ============ Player / Action 相關異常 ============

class PlayerNotInRoom(RoomError):
    """玩家不在房間內"""
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__("player not in room")


class NotYourTurn(RoomError):
    """還沒輪到這位玩家"""
    def __init__(self):
        super().__init__("not your turn")


class InvalidAction(RoomError):
    """不是 hit / stand 的動作"""
    def __init__(self, action):
        self.action = action
        super().__init__("invalid action")
