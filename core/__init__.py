"""
核心邏輯層

這個 package 包含所有核心業務邏輯，包括：
- LiveKit Gateway：包裝 LiveKit Server SDK
- Presence Tracker：比對佔用快照、產生進出事件
- Locks：私人會議室的上鎖判斷
- Exceptions：業務異常
"""
