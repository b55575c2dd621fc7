"""Built-in tracker definitions.

These are the defaults every configuration is merged onto. Rates assume
the default 4-hour interval (six updates per in-game day).
"""

from typing import Any

from survival_needs.config import MODULE_ID

ICON_PATH_PREFIX = f"modules/{MODULE_ID}/icons/"


DEFAULT_TRACKER_CONFIGS: list[dict[str, Any]] = [
    # --- HUNGER: 100 points over ~30 days ---
    {
        "id": "hunger",
        "name": "Hunger",
        "icon_class": "fas fa-drumstick-bite",
        "icon_color": "green",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 0.555,
        "threshold_effects": [
            {
                "threshold": 40,
                "name": "Peckish",
                "icon": f"{ICON_PATH_PREFIX}Status_Hunger.png",
                "symptoms": [{"slug": "fatigued", "value": None}],
            },
            {
                "threshold": 70,
                "name": "Famished",
                "icon": f"{ICON_PATH_PREFIX}Status_Hunger.png",
                "symptoms": [{"slug": "enfeebled", "value": 1}],
            },
            {
                "threshold": 90,
                "name": "Starving",
                "icon": f"{ICON_PATH_PREFIX}Status_InjuredMinor.png",
                "symptoms": [
                    {"slug": "drained", "value": 2},
                    {"slug": "enfeebled", "value": 2},
                    {"slug": "fatigued", "value": None},
                ],
            },
        ],
        "regeneration": {
            "by_long_rest": False,
            "by_item": True,
            "item_restore_amount": 3.33,
            "item_button_label": "Eat Food",
            "item_filter": {
                "types": ["consumable", "equipment"],
                "name_keywords": [
                    "food", "ration", "meal", "jerky", "biscuit", "bread", "cheese",
                    "meat", "stew", "fruit", "vegetable", "berries", "nuts",
                    "pemmican", "travel", "iron",
                ],
            },
        },
    },
    # --- THIRST: 100 points over ~5 days ---
    {
        "id": "thirst",
        "name": "Thirst",
        "icon_class": "fas fa-tint",
        "icon_color": "#DAA520",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 3.33,
        "threshold_effects": [
            {
                "threshold": 35,
                "name": "Thirsty",
                "icon": f"{ICON_PATH_PREFIX}Status_Thirst.png",
                "symptoms": [{"slug": "fatigued", "value": None}],
            },
            {
                "threshold": 70,
                "name": "Parched",
                "icon": f"{ICON_PATH_PREFIX}Status_Thirst.png",
                "symptoms": [
                    {"slug": "enfeebled", "value": 1},
                    {"slug": "fatigued", "value": None},
                ],
            },
            {
                "threshold": 90,
                "name": "Dehydrated",
                "icon": f"{ICON_PATH_PREFIX}Status_DifficultyBreathing.png",
                "symptoms": [
                    {"slug": "enfeebled", "value": 2},
                    {"slug": "drained", "value": 2},
                    {"slug": "stupefied", "value": 1},
                ],
            },
        ],
        "regeneration": {
            "by_long_rest": False,
            "by_item": True,
            "item_restore_amount": 20,
            "item_button_label": "Drink",
            "item_filter": {
                "types": ["consumable", "equipment"],
                "name_keywords": [
                    "water", "drink", "waterskin", "canteen", "flask", "ale", "beer",
                    "wine", "mead", "juice", "tea", "broth", "potion",
                ],
            },
        },
    },
    # --- SLEEP DEPRIVATION ---
    {
        "id": "sleep",
        "name": "Sleep Deprivation",
        "icon_class": "fas fa-bed",
        "icon_color": "dodgerblue",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 10,
        "threshold_effects": [
            {
                "threshold": 30,
                "name": "Tired",
                "icon": f"{ICON_PATH_PREFIX}Mood_Sleepy.png",
                "symptoms": [{"slug": "fatigued", "value": None}],
            },
            {
                "threshold": 60,
                "name": "Weary",
                "icon": f"{ICON_PATH_PREFIX}Mood_Sleepy.png",
                "symptoms": [
                    {"slug": "slowed", "value": 1},
                    {"slug": "stupefied", "value": 1},
                ],
            },
            {
                "threshold": 85,
                "name": "Exhausted",
                "icon": f"{ICON_PATH_PREFIX}Mood_Ill.png",
                "symptoms": [
                    {"slug": "stupefied", "value": 2},
                    {"slug": "slowed", "value": 1},
                    {"slug": "drained", "value": 1},
                ],
            },
        ],
        "regeneration": {"by_long_rest": True, "long_rest_amount": 80, "by_item": False},
        "special_actions": [
            {
                "action_id": "manage_sleep",
                "label": "Rest Options",
                "icon": "fas fa-moon",
                "opens_choices_dialog": True,
                "choices": [
                    {
                        "id": "short_nap",
                        "label": "Short Nap (30 min)",
                        "time_minutes": 30,
                        "reduces_by": 15,
                        "chat_message": "{actorName} takes a short, refreshing nap.",
                    },
                    {
                        "id": "moderate_sleep",
                        "label": "Sleep (4 hours)",
                        "time_minutes": 240,
                        "reduces_by": 40,
                        "chat_message": "{actorName} gets a few hours of solid sleep.",
                    },
                    {
                        "id": "full_long_rest",
                        "label": "Full Night's Rest (8+ hours)",
                        "time_minutes": 480,
                        "triggers_long_rest": True,
                        "chat_message": "{actorName} settles in for a full night's rest.",
                    },
                ],
            }
        ],
    },
    # --- BLADDER: filled by drinking ---
    {
        "id": "piss",
        "name": "Bladder",
        "icon_class": "fas fa-water",
        "icon_color": "gold",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 0,
        "threshold_effects": [
            {
                "threshold": 60,
                "name": "Need to Urinate",
                "icon": f"{ICON_PATH_PREFIX}Mood_Discomfort.png",
                "symptoms": [],
            },
            {
                "threshold": 90,
                "name": "Urgent Bladder",
                "icon": f"{ICON_PATH_PREFIX}Mood_Panicked.png",
                "symptoms": [
                    {"slug": "clumsy", "value": 1, "note": "Distracted and rushing"},
                    {"slug": "fatigued", "value": None},
                ],
            },
        ],
        "special_actions": [
            {
                "action_id": "relieve_piss",
                "label": "Urinate",
                "icon": "fas fa-toilet-paper",
                "time_minutes": 2,
                "reduces_to": 0,
                "chat_message": "{actorName} finds a moment to relieve their bladder.",
            }
        ],
    },
    # --- BOWELS: filled by eating ---
    {
        "id": "poop",
        "name": "Bowels",
        "icon_class": "fas fa-poo",
        "icon_color": "saddlebrown",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 0,
        "threshold_effects": [
            {
                "threshold": 70,
                "name": "Need to Defecate",
                "icon": f"{ICON_PATH_PREFIX}Mood_Discomfort.png",
                "symptoms": [{"slug": "slowed", "value": 1, "note": "Stomach discomfort"}],
            },
            {
                "threshold": 95,
                "name": "Bowel Emergency",
                "icon": f"{ICON_PATH_PREFIX}Mood_Panicked.png",
                "symptoms": [
                    {"slug": "enfeebled", "value": 2, "note": "Severe discomfort and cramps"},
                    {"slug": "sickened", "value": 1},
                ],
            },
        ],
        "special_actions": [
            {
                "action_id": "relieve_poop",
                "label": "Defecate",
                "icon": "fas fa-toilet-paper",
                "time_minutes": 10,
                "reduces_to": 0,
                "chat_message": "{actorName} takes time for a bowel movement.",
            }
        ],
    },
    # --- BOREDOM ---
    {
        "id": "boredom",
        "name": "Boredom",
        "icon_class": "fas fa-hourglass-end",
        "icon_color": "slategray",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 2,
        "threshold_effects": [
            {
                "threshold": 40,
                "name": "Restless",
                "icon": f"{ICON_PATH_PREFIX}Mood_Bored.png",
                "symptoms": [],
            },
            {
                "threshold": 70,
                "name": "Bored",
                "icon": f"{ICON_PATH_PREFIX}Mood_Bored.png",
                "symptoms": [{"slug": "stupefied", "value": 1, "note": "Mind wandering"}],
            },
            {
                "threshold": 95,
                "name": "Profoundly Bored",
                "icon": f"{ICON_PATH_PREFIX}Mood_Sad.png",
                "symptoms": [
                    {"slug": "stupefied", "value": 2, "note": "Apathetic"},
                    {"slug": "fascinated", "value": None, "note": "Latches onto anything novel"},
                ],
            },
        ],
        "special_actions": [
            {
                "action_id": "relieve_boredom",
                "label": "Alleviate Boredom",
                "icon": "fas fa-dice",
                "opens_choices_dialog": True,
                "choices": [
                    {"id": "read", "label": "Read a Book", "time_minutes": 60, "reduces_by": 40,
                     "stress_change": -5, "chat_message": "{actorName} gets lost in a good book."},
                    {"id": "practice_skill", "label": "Practice a Skill/Craft", "time_minutes": 60,
                     "reduces_by": 35, "stress_change": 0,
                     "chat_message": "{actorName} hones their abilities."},
                    {"id": "play_game", "label": "Play a Game (Cards, Dice)", "time_minutes": 30,
                     "reduces_by": 25, "stress_change": -10,
                     "chat_message": "{actorName} enjoys a lighthearted game."},
                    {"id": "socialize_pleasantly", "label": "Pleasant Socializing",
                     "time_minutes": 30, "reduces_by": 30, "stress_change": -15,
                     "chat_message": "{actorName} enjoys some friendly conversation."},
                    {"id": "observe_nature", "label": "Observe Nature/People Watch",
                     "time_minutes": 20, "reduces_by": 15, "stress_change": -5,
                     "chat_message": "{actorName} finds interest in their surroundings."},
                    {"id": "tinker", "label": "Tinker/Fiddle with Something", "time_minutes": 30,
                     "reduces_by": 20, "stress_change": 0,
                     "chat_message": "{actorName} tinkers with an object."},
                    {"id": "prank_light", "label": "Play a Light Prank", "time_minutes": 10,
                     "reduces_by": 30, "stress_change": 5,
                     "chat_message": "{actorName} plays a harmless prank, feeling a bit livelier."},
                    {"id": "gamble_small", "label": "Gamble (Small Stakes)", "time_minutes": 60,
                     "reduces_by": 25, "stress_change": 10,
                     "chat_message": "{actorName} tries their luck with a small gamble."},
                    {"id": "spread_rumor", "label": "Spread a Minor Rumor", "time_minutes": 15,
                     "reduces_by": 35, "stress_change": 5,
                     "chat_message": "{actorName} whispers a tantalizing rumor."},
                    {"id": "annoy_someone", "label": "Annoy Someone", "time_minutes": 5,
                     "reduces_by": 20, "stress_change": 15,
                     "chat_message": "{actorName} intentionally annoys someone, finding it amusing."},
                    {"id": "vandalize_minor", "label": "Minor Vandalism/Mischief", "time_minutes": 10,
                     "reduces_by": 40, "stress_change": 20,
                     "chat_message": "{actorName} causes some minor, troublesome mischief."},
                    {"id": "start_argument", "label": "Start a Pointless Argument",
                     "time_minutes": 15, "reduces_by": 25, "stress_change": 25,
                     "chat_message": "{actorName} picks a fight over something trivial."},
                ],
            }
        ],
    },
    # --- STRESS: mostly event driven ---
    {
        "id": "stress",
        "name": "Stress",
        "icon_class": "fas fa-bolt",
        "icon_color": "orangered",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 0,
        "threshold_effects": [
            {
                "threshold": 40,
                "name": "Anxious",
                "icon": f"{ICON_PATH_PREFIX}Mood_Stressed.png",
                "symptoms": [],
            },
            {
                "threshold": 70,
                "name": "Stressed",
                "icon": f"{ICON_PATH_PREFIX}Mood_Stressed.png",
                "symptoms": [{"slug": "frightened", "value": 1, "note": "On edge, jumpy"}],
            },
            {
                "threshold": 95,
                "name": "Overwhelmed",
                "icon": f"{ICON_PATH_PREFIX}Mood_Panicked.png",
                "symptoms": [
                    {"slug": "stupefied", "value": 2},
                    {"slug": "frightened", "value": 2, "note": "Panicked and scattered"},
                    {"slug": "confused", "value": None, "note": "Cannot think straight"},
                ],
            },
        ],
        "regeneration": {"by_long_rest": True, "long_rest_amount": 50, "by_item": False},
        "special_actions": [
            {
                "action_id": "relieve_stress",
                "label": "Alleviate Stress",
                "icon": "fas fa-peace",
                "opens_choices_dialog": True,
                "choices": [
                    {"id": "meditate", "label": "Meditate / Deep Breathing", "time_minutes": 20,
                     "reduces_by": 30, "boredom_change": 5,
                     "chat_message": "{actorName} finds a moment of calm through meditation."},
                    {"id": "talk_it_out", "label": "Talk with a Confidante", "time_minutes": 30,
                     "reduces_by": 40, "boredom_change": -5,
                     "chat_message": "{actorName} shares their burdens with a friend."},
                    {"id": "hobby_relaxing", "label": "Engage in a Relaxing Hobby",
                     "time_minutes": 60, "reduces_by": 50, "boredom_change": -20,
                     "chat_message": "{actorName} loses themself in a relaxing hobby."},
                    {"id": "take_walk", "label": "Take a Quiet Walk", "time_minutes": 30,
                     "reduces_by": 20, "boredom_change": 0,
                     "chat_message": "{actorName} clears their head with a quiet walk."},
                    {"id": "vigorous_exercise", "label": "Vigorous Exercise", "time_minutes": 30,
                     "reduces_by": 35, "boredom_change": 10,
                     "chat_message": "{actorName} burns off stress with intense exercise."},
                    {"id": "comfort_eat", "label": "Comfort Eating (Minor)", "time_minutes": 10,
                     "reduces_by": 15, "boredom_change": -5,
                     "chat_message": "{actorName} indulges in a small comfort food."},
                    {"id": "drink_heavily", "label": "Drink Heavily (Alcohol)", "time_minutes": 60,
                     "reduces_by": 50, "boredom_change": -30,
                     "chat_message": "{actorName} tries to drink their stress away."},
                    {"id": "lash_out", "label": "Lash Out Verbally", "time_minutes": 5,
                     "reduces_by": 20, "boredom_change": -10,
                     "chat_message": "{actorName} vents their frustration by lashing out."},
                    {"id": "reckless_act", "label": "Minor Reckless Act", "time_minutes": 10,
                     "reduces_by": 30, "boredom_change": -20,
                     "chat_message": "{actorName} does something a bit reckless to feel alive."},
                    {"id": "isolate", "label": "Isolate Self", "time_minutes": 60,
                     "reduces_by": 10, "boredom_change": 20,
                     "chat_message": "{actorName} withdraws, seeking solitude but finding little relief."},
                ],
            }
        ],
    },
    # --- WETNESS ---
    {
        "id": "wetness",
        "name": "Wetness",
        "icon_class": "fas fa-cloud-rain",
        "icon_color": "deepskyblue",
        "default_value": 0,
        "max_value": 100,
        "increase_per_interval": 0,
        "threshold_effects": [
            {
                "threshold": 30,
                "name": "Damp",
                "icon": f"{ICON_PATH_PREFIX}Status_Wet.png",
                "symptoms": [],
            },
            {
                "threshold": 70,
                "name": "Soaked",
                "icon": f"{ICON_PATH_PREFIX}Status_Wet.png",
                "symptoms": [
                    {"slug": "clumsy", "value": 1, "note": "Slippery clothes and gear"},
                    {"slug": "fatigued", "value": None, "note": "Uncomfortable and chilled"},
                ],
            },
            {
                "threshold": 95,
                "name": "Freezing Wet",
                "icon": f"{ICON_PATH_PREFIX}Status_Windchill.png",
                "symptoms": [
                    {"slug": "slowed", "value": 1},
                    {"slug": "enfeebled", "value": 2, "note": "Impaired by cold and wetness"},
                    {"slug": "drained", "value": 1},
                ],
            },
        ],
        "special_actions": [
            {
                "action_id": "dry_off",
                "label": "Dry Off",
                "icon": "fas fa-fire",
                "time_minutes": 30,
                "reduces_to": 0,
                "chat_message": "{actorName} takes time to dry their clothes and gear.",
            }
        ],
    },
    # --- DIVINE FAVOR: ceiling grows with shrines and followers ---
    {
        "id": "divine_favor",
        "name": "Divine Favor",
        "enabled": False,
        "icon_class": "fas fa-sun",
        "icon_color": "goldenrod",
        "default_value": 0,
        "max_value": 10,
        "base_increase_per_interval": 0,
        "increase_per_shrine_per_interval": 0.1,
        "is_dynamic_max": True,
        "default_max_value": 3,
        "shrines_per_extra_point": 1,
        "followers_per_max_point": 10,
        "sub_properties": {"shrines": 0, "followers": 0},
        "threshold_effects": [],
        "regeneration": {"by_long_rest": False, "long_rest_amount": 0, "by_item": False},
    },
]
