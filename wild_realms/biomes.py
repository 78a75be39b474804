from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .challenge import ChallengeOption, ChallengeStep, OverlayStyle
from .minigame import Target
from .notices import SpeciesInfo
from .quiz import QuizItem
from .steering import EdgeRule, EntryDirection, MotionClass, SpeciesMotion, WorldBounds


@dataclass(frozen=True, slots=True)
class Biome:
    key: str
    name: str
    description: str
    location: str = ""
    scene_key: str | None = None  # immersive scene, when one exists
    species: tuple[SpeciesInfo, ...] = ()


def biome_key(name: str) -> str:
    return "".join(str(name).lower().split())


@dataclass(frozen=True, slots=True)
class SceneContent:
    """Everything an immersive scene needs besides the clock and seed."""

    key: str
    title: str
    bounds: WorldBounds
    species: tuple[SpeciesMotion, ...]
    targets: tuple[Target, ...]
    info: Mapping[str, SpeciesInfo]
    quiz_bank: Mapping[str, QuizItem]
    challenge: tuple[ChallengeStep, ...]
    win_title: str
    win_text: str
    fail_title: str
    fail_text: str
    overlay: OverlayStyle = OverlayStyle.TINT


E = EntryDirection

OCEAN_BOUNDS = WorldBounds(
    x=42.0,
    z=42.0,
    y_top=12.0,
    y_bottom=-18.0,
    despawn_margin=12.0,
    vertical_margin=2.0,
    entry_spread=0.7,
    vertical_entry=True,
    respawn_delay_s=(1.0, 3.0),
)

OCEAN_SPECIES: tuple[SpeciesMotion, ...] = (
    SpeciesMotion(
        species_id="turtle",
        motion=MotionClass.SWIM,
        base_y=-3.6,
        turn_jitter=0.25,
        bob_amp=0.12,
        bob_freq=0.7,
        min_speed=0.55,
        max_speed=1.0,
        entry_weights=((E.DEEP_TO_SURFACE, 6), (E.LEFT_TO_RIGHT, 2), (E.RIGHT_TO_LEFT, 2), (E.DIAGONAL_UP, 1)),
        spawn_delay_s=0.0,
        scale=0.25,
    ),
    SpeciesMotion(
        species_id="shark",
        motion=MotionClass.SWIM,
        base_y=-3.8,
        turn_jitter=0.45,
        bob_amp=0.08,
        bob_freq=1.1,
        min_speed=1.0,
        max_speed=1.6,
        entry_weights=((E.LEFT_TO_RIGHT, 5), (E.RIGHT_TO_LEFT, 5), (E.DIAGONAL_UP, 1), (E.DIAGONAL_DOWN, 1)),
        spawn_delay_s=4.0,
        scale=0.35,
    ),
    SpeciesMotion(
        species_id="clownfish",
        motion=MotionClass.SWIM,
        base_y=-3.2,
        turn_jitter=0.7,
        bob_amp=0.1,
        bob_freq=1.5,
        min_speed=0.9,
        max_speed=1.4,
        entry_weights=((E.LEFT_TO_RIGHT, 4), (E.RIGHT_TO_LEFT, 4), (E.DIAGONAL_UP, 2)),
        spawn_delay_s=7.5,
        scale=0.16,
    ),
    SpeciesMotion(
        species_id="manta",
        motion=MotionClass.SWIM,
        base_y=-3.0,
        turn_jitter=0.2,
        bob_amp=0.15,
        bob_freq=0.8,
        min_speed=0.6,
        max_speed=1.0,
        entry_weights=((E.DIAGONAL_UP, 4), (E.DEEP_TO_SURFACE, 3), (E.LEFT_TO_RIGHT, 2), (E.RIGHT_TO_LEFT, 2)),
        spawn_delay_s=11.0,
        scale=0.75,
    ),
)

OCEAN_INFO: dict[str, SpeciesInfo] = {
    "turtle": SpeciesInfo(
        title="Green Sea Turtle (Chelonia mydas)",
        status="Endangered",
        blurb="Grazes seagrass and helps keep meadows healthy. Threats: bycatch, habitat loss, debris.",
        link="https://www.iucnredlist.org/species/4615/11037468",
    ),
    "shark": SpeciesInfo(
        title="Blacktip Reef Shark (Carcharhinus melanopterus)",
        status="Near Threatened",
        blurb="Key mesopredator on coral reefs. Pressures include overfishing and habitat loss.",
        link="https://www.iucnredlist.org/species/39375/16523699",
    ),
    "clownfish": SpeciesInfo(
        title="Clownfish (Amphiprioninae)",
        status="Least Concern",
        blurb="Lives with anemones; reef degradation and warming threaten local populations.",
        link="https://www.iucnredlist.org/search?query=Amphiprion&searchType=species",
    ),
    "manta": SpeciesInfo(
        title="Manta Ray (Mobula spp.)",
        status="Vulnerable",
        blurb="Gentle plankton-feeders; impacted by bycatch, targeted fishing and microplastics.",
        link="https://www.iucnredlist.org/",
    ),
}

OCEAN_QUIZ: dict[str, QuizItem] = {
    "turtle": QuizItem("Diet?", ("Herbivore", "Omnivore", "Carnivore"), "Herbivore"),
    "shark": QuizItem("Conservation status?", ("Least Concern", "Near Threatened", "Endangered"), "Near Threatened"),
    "clownfish": QuizItem("Lives with...", ("Coral", "Anemones", "Kelp"), "Anemones"),
    "manta": QuizItem("Feeding style?", ("Bites prey", "Filter feeds", "Ambush"), "Filter feeds"),
}

OCEAN_CHALLENGE: tuple[ChallengeStep, ...] = (
    ChallengeStep(
        id="plastic",
        title="Floating Plastics Detected",
        prompt="A gyre is funneling debris toward your reef. What's your first action?",
        options=(
            ChallengeOption("Deploy cleanup drones", -2, "Removes surface plastics quickly."),
            ChallengeOption("Wait for currents to shift", +1, "Debris accumulates while you wait."),
        ),
    ),
    ChallengeStep(
        id="runoff",
        title="Coastal Runoff Spike",
        prompt="Heavy rainfall flushed nutrients into the bay. Choose a mitigation:",
        options=(
            ChallengeOption("Open spillway & aerate", -1, "Improves oxygen, disperses bloom risk."),
            ChallengeOption("Close access & monitor only", +1, "Hypoxia risk increases."),
        ),
    ),
    ChallengeStep(
        id="oil",
        title="Minor Oil Sheen Offshore",
        prompt="A small slick approaches. Best response now?",
        options=(
            ChallengeOption("Deploy booms & skimmers", -2, "Contains and removes oil quickly."),
            ChallengeOption("Issue advisory only", +2, "Sheen reaches habitat, stressing wildlife."),
        ),
    ),
)

OCEAN = SceneContent(
    key="ocean",
    title="Ocean Reef",
    bounds=OCEAN_BOUNDS,
    species=OCEAN_SPECIES,
    targets=(
        Target("turtle", "Green Turtle"),
        Target("shark", "Reef Shark"),
        Target("clownfish", "Clownfish"),
        Target("manta", "Manta Ray"),
    ),
    info=OCEAN_INFO,
    quiz_bank=OCEAN_QUIZ,
    challenge=OCEAN_CHALLENGE,
    win_title="Reef Stabilized",
    win_text="Your interventions reduced impacts. Biodiversity rebounds and water clears.",
    fail_title="Ecosystem Stressed",
    fail_text="High pollution stressed wildlife. Try alternative interventions to improve outcomes.",
)

# The vertical band only constrains the owl; walkers below y_bottom ignore it.
TEMPERATE_BOUNDS = WorldBounds(
    x=45.0,
    z=45.0,
    y_top=10.0,
    y_bottom=-4.0,
    despawn_margin=10.0,
    vertical_margin=1.0,
    entry_spread=0.6,
    vertical_entry=False,
    respawn_delay_s=(1.2, 3.0),
    edge_rule=EdgeRule.FAR_EDGE,
)

_WALK_FREQS = (0.8, 1.3, 1.2)
_GLIDE_FREQS = (0.6, 1.1, 0.7)

TEMPERATE_SPECIES: tuple[SpeciesMotion, ...] = (
    SpeciesMotion(
        species_id="deer",
        motion=MotionClass.WALK,
        base_y=-5.2,
        turn_jitter=0.06,
        bob_amp=0.008,
        bob_freq=2.4,
        min_speed=0.6,
        max_speed=1.1,
        entry_weights=((E.LEFT_TO_RIGHT, 5), (E.RIGHT_TO_LEFT, 5), (E.DIAGONAL, 1)),
        spawn_delay_s=0.0,
        scale=0.12,
        heading_freqs=_WALK_FREQS,
    ),
    SpeciesMotion(
        species_id="fox",
        motion=MotionClass.WALK,
        base_y=-5.25,
        turn_jitter=0.12,
        bob_amp=0.010,
        bob_freq=3.2,
        min_speed=0.9,
        max_speed=1.6,
        entry_weights=((E.LEFT_TO_RIGHT, 6), (E.RIGHT_TO_LEFT, 6), (E.DIAGONAL, 2)),
        spawn_delay_s=3.5,
        scale=0.12,
        heading_freqs=_WALK_FREQS,
    ),
    SpeciesMotion(
        species_id="owl",
        motion=MotionClass.GLIDE,
        base_y=1.2,
        turn_jitter=0.15,
        bob_amp=0.5,
        bob_freq=0.7,
        min_speed=0.8,
        max_speed=1.4,
        entry_weights=((E.DIAGONAL, 3), (E.LEFT_TO_RIGHT, 2), (E.RIGHT_TO_LEFT, 2)),
        spawn_delay_s=7.0,
        bank=0.1,
        scale=0.08,
        heading_freqs=_GLIDE_FREQS,
        respawn_delay_s=(1.2, 3.2),
    ),
    SpeciesMotion(
        species_id="bear",
        motion=MotionClass.WALK,
        base_y=-5.30,
        turn_jitter=0.05,
        bob_amp=0.006,
        bob_freq=2.0,
        min_speed=0.4,
        max_speed=0.8,
        entry_weights=((E.LEFT_TO_RIGHT, 3), (E.RIGHT_TO_LEFT, 3)),
        spawn_delay_s=10.5,
        scale=0.16,
        heading_freqs=_WALK_FREQS,
    ),
)

TEMPERATE_INFO: dict[str, SpeciesInfo] = {
    "deer": SpeciesInfo(
        title="White-tailed Deer (Odocoileus virginianus)",
        status="Least Concern",
        blurb="Key herbivore; shape understory. Overabundance can hinder tree regeneration.",
        link="https://www.iucnredlist.org/species/42394/22162006",
    ),
    "fox": SpeciesInfo(
        title="Red Fox (Vulpes vulpes)",
        status="Least Concern",
        blurb="Omnivorous mesopredator controlling rodents; adapts well to edges.",
        link="https://www.iucnredlist.org/species/23062/46190249",
    ),
    "owl": SpeciesInfo(
        title="Great Horned Owl (Bubo virginianus)",
        status="Least Concern",
        blurb="Nocturnal apex bird; keeps small mammal populations in check.",
        link="https://www.iucnredlist.org/species/22689055/93335852",
    ),
    "bear": SpeciesInfo(
        title="American Black Bear (Ursus americanus)",
        status="Least Concern",
        blurb="Omnivore; seed disperser via fruit consumption; human conflict risks.",
        link="https://www.iucnredlist.org/species/41687/114251609",
    ),
}

TEMPERATE_QUIZ: dict[str, QuizItem] = {
    "deer": QuizItem("Primary diet?", ("Herbivore", "Carnivore", "Insectivore"), "Herbivore"),
    "fox": QuizItem("Trophic role?", ("Producer", "Mesopredator", "Detritivore"), "Mesopredator"),
    "owl": QuizItem("Active mostly...", ("Day", "Night", "Dawn only"), "Night"),
    "bear": QuizItem("Eats mostly...", ("Only meat", "Only plants", "Both plants & meat"), "Both plants & meat"),
}

TEMPERATE_CHALLENGE: tuple[ChallengeStep, ...] = (
    ChallengeStep(
        id="litter",
        title="Trail Litter Found",
        prompt="Visitors left trash near the creek. What's your first response?",
        options=(
            ChallengeOption("Organize a quick cleanup", -1, "Removes hazards for wildlife fast."),
            ChallengeOption("Log it for later", +1, "Animals may ingest plastics meanwhile."),
        ),
    ),
    ChallengeStep(
        id="runoff",
        title="Fertilizer Runoff",
        prompt="Rain washed farm fertilizer into the stream. Mitigate now?",
        options=(
            ChallengeOption("Install silt fences & buffer plants", -2, "Reduces nutrients into water."),
            ChallengeOption("Post a warning sign only", +1, "Algae & low oxygen risk increase."),
        ),
    ),
    ChallengeStep(
        id="invasive",
        title="Invasive Plant Spread",
        prompt="A patch of garlic mustard spreads under oaks.",
        options=(
            ChallengeOption("Pull & bag invasives this week", -2, "Protects native understory."),
            ChallengeOption("Monitor for a month", +2, "Spread accelerates and displaces natives."),
        ),
    ),
)

TEMPERATE = SceneContent(
    key="temperate",
    title="Temperate Forest",
    bounds=TEMPERATE_BOUNDS,
    species=TEMPERATE_SPECIES,
    targets=(
        Target("deer", "Deer"),
        Target("fox", "Fox"),
        Target("owl", "Owl"),
        Target("bear", "Black Bear"),
    ),
    info=TEMPERATE_INFO,
    quiz_bank=TEMPERATE_QUIZ,
    challenge=TEMPERATE_CHALLENGE,
    win_title="Forest Stabilized",
    win_text="Your actions reduced human impacts. Streams clear, understory rebounds.",
    fail_title="Ecosystem Stressed",
    fail_text="Impacts remained high. Try alternative responses to protect the habitat.",
    overlay=OverlayStyle.HAZE,
)

SCENES: dict[str, SceneContent] = {OCEAN.key: OCEAN, TEMPERATE.key: TEMPERATE}


def _profile(title: str, status: str, blurb: str) -> SpeciesInfo:
    return SpeciesInfo(title=title, status=status, blurb=blurb)


BIOMES: tuple[Biome, ...] = (
    Biome(
        "rainforest",
        "Rainforest",
        "Dense tropical forests with high biodiversity",
        "Amazon Basin, Brazil",
        species=(
            _profile("Jaguar (Panthera onca)", "Near Threatened", "Apex predator of the forest floor and riverbanks."),
            _profile("Harpy Eagle (Harpia harpyja)", "Vulnerable", "Hunts sloths and monkeys in the canopy."),
            _profile("Poison Dart Frog (Dendrobates tinctorius)", "Least Concern", "Bright skin warns predators of its toxins."),
        ),
    ),
    Biome(
        "savannah",
        "Savannah",
        "Grasslands with scattered trees and seasonal rainfall",
        "Serengeti, Tanzania",
        species=(
            _profile("African Elephant (Loxodonta africana)", "Endangered", "Opens woodland and spreads seeds across the plains."),
            _profile("Lion (Panthera leo)", "Vulnerable", "Social predator that keeps grazer herds moving."),
            _profile("Plains Zebra (Equus quagga)", "Near Threatened", "Grazes tall grass ahead of the wildebeest migration."),
        ),
    ),
    Biome(
        "tundra",
        "Tundra",
        "Cold, treeless regions with permafrost",
        "Arctic Circle, Norway",
        species=(
            _profile("Arctic Fox (Vulpes lagopus)", "Least Concern", "Changes coat colour with the seasons."),
            _profile("Reindeer (Rangifer tarandus)", "Vulnerable", "Migrates long distances to reach lichen pastures."),
            _profile("Snowy Owl (Bubo scandiacus)", "Vulnerable", "Breeding success tracks lemming cycles."),
        ),
    ),
    Biome(
        "desert",
        "Desert",
        "Arid lands with extreme temperatures and sparse life",
        "Sahara Desert, Africa",
        species=(
            _profile("Fennec Fox (Vulpes zerda)", "Least Concern", "Large ears shed heat during the day."),
            _profile("Dorcas Gazelle (Gazella dorcas)", "Vulnerable", "Can go without drinking, taking water from plants."),
            _profile("Addax (Addax nasomaculatus)", "Critically Endangered", "Fewer than a hundred remain in the wild."),
        ),
    ),
    Biome(
        "wetlands",
        "Wetlands",
        "Marshes, swamps, and bogs teeming with life",
        "Louisiana, USA",
        species=(
            _profile("American Alligator (Alligator mississippiensis)", "Least Concern", "Digs pools that hold water through droughts."),
            _profile("Whooping Crane (Grus americana)", "Endangered", "Recovered from fewer than twenty birds."),
            _profile("Roseate Spoonbill (Platalea ajaja)", "Least Concern", "Sweeps its bill through shallows for prey."),
        ),
    ),
    Biome(
        "temperateforest",
        "Temperate Forest",
        "Deciduous and mixed forests with distinct seasons",
        scene_key="temperate",
        species=tuple(TEMPERATE_INFO.values()),
    ),
    Biome(
        "ocean",
        "Ocean",
        "Marine ecosystems from surface to deep sea",
        "Pacific Ocean",
        scene_key="ocean",
        species=tuple(OCEAN_INFO.values()),
    ),
)


def find_biome(name_or_key: str) -> Biome | None:
    key = biome_key(name_or_key)
    for b in BIOMES:
        if b.key == key:
            return b
    return None
