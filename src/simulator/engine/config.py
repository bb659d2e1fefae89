'''
This file contains some constants and configuration parameters of the replay engine
'''

SCHEDULER_TIME_SCALE = 1e-6 # 1us unit time of the scheduler (same resolution as the recorded traces).
                            # Events are created with time in seconds, the scheduler converts it to integer ticks
                            # for ordering, so that float noise never swaps two recorded events.

DEFAULT_EVENT_PRIORITY = 0
