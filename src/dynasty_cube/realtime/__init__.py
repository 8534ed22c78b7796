"""Real-time infrastructure — Redis pub/sub + Server-Sent Events.

Learn: Pick events flow through two hops:
1. DraftService → Redis PUBLISH on draft-updates-{session_id}
2. Redis SUBSCRIBE → SSE response → live draft board in the browser

This decouples the request that makes a pick from every client watching.
"""
