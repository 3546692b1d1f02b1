"""
服務層

這個 package 包含純計算與 LiveKit 存取邏輯，不負責 HTTP：
- AuthService：登入名單比對
- TokenService：簽發 Access Token
- OccupancyService：列出所有房間的參與者
- MetadataService：participant metadata 的編碼 / 解碼
- ParticipantService：寫入狀態與房間鎖
- NotificationService：進出事件與通知
- RoomCatalog：固定的房間目錄
"""
