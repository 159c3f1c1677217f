"""
Core — Simulated Vehicle and Mission Lifecycle (GCS back end)

  telemetry.py           Snapshot, plan and mission record dataclasses
  navigation.py          Great-circle distance, bearing, waypoint stepping
  simulator.py           TelemetrySimulator — one fabricated reading per tick
  mission_controller.py  Idle -> Planning -> Active lifecycle, history records
  mission_history.py     History store interface + seeded in-memory store
  analytics.py           Overview cards, outcome and breeding-site statistics

The dashboard (gcs_dashboard.py) only reads snapshots and mission tuples
and sends intents to MissionController.
"""
