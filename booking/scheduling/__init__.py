"""
Scheduling core

Pure computation over fetched snapshots, no database access:
- Calendar arithmetic (calendar_math.py)
- Interval overlap primitive (intervals.py)
- Slot generation for a single day (slot_generator.py)
- Day availability oracle and calendar day statuses (day_oracle.py)
- Service timing change conflicts (conflicts.py)
"""
