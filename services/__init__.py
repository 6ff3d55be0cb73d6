"""
Services Package

- snapshot: Pure computation of RUB values and change since the previous cycle
- renderer: ru-RU number formatting and the table display surface
- event_bus: Async pub/sub used to push snapshots to WebSocket clients
- refresh_scheduler: Single-flight refresh cycle on a fixed interval
"""
