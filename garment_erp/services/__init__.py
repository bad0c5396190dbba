"""
Service layer.

Pure calculation modules (sizes, pricing, allocation, picking, qc, permissions)
hold the business rules and have no I/O. The *Service classes orchestrate
repositories, commit, and publish realtime/cache side effects.
"""
