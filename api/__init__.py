"""
API 層：FastAPI routers

每個 router 只負責 HTTP 轉換，業務邏輯在 core / services
"""
