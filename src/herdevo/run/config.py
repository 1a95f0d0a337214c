import configparser
import os

from herdevo.activations import ActivationKind

STEERING_MODES = ('position', 'heading')
CLOCK_UNITS    = ('ticks', 'seconds')

# The boolean [INPUTS] toggles, in the order their values enter the network.
INPUT_TOGGLES = ('input_angle_of_herder',
                 'input_sheep_sensor',
                 'input_wall_sensor',
                 'input_distance_to_centroid',
                 'input_angle_to_centroid',
                 'input_relative_centroid_offset',
                 'input_absolute_herder_position',
                 'input_flock_movement_angle',
                 'input_absolute_centroid_position',
                 'input_angle_to_next_waypoint',
                 'input_closest_approach')

class Config:

    @staticmethod
    def _parse_int_list(raw):
        """
        Parse a comma-separated list of integers ("5, 10").
        Lists and tuples are returned as lists.
        """
        if raw is None:
            return []
        if isinstance(raw, (list, tuple)):
            return [int(v) for v in raw]
        raw = raw.strip()
        if raw == '':
            return []
        return [int(v.strip()) for v in raw.split(',')]

    @staticmethod
    def _parse_activations(raw):
        """
        Parse a comma-separated list of activation names into ActivationKinds.

        Raises:
            ValueError: if a name is not a known activation function
        """
        if raw is None:
            return []
        if isinstance(raw, str):
            raw = [v for v in raw.split(',') if v.strip()]
        return [v if isinstance(v, ActivationKind) else ActivationKind.from_name(v) for v in raw]

    def _set_defaults(self):
        # [POPULATION]
        self.population_size = 50

        # [FOLLOWER]
        self.flock_size                   = 20
        self.notice_distance              = 140.0
        self.follower_min_speed           = 0.1
        self.follower_max_speed           = 0.7
        self.mass_radius                  = 50.0
        self.cohesion_multiplier          = 0.5
        self.separation_multiplier        = 0.3
        self.alignment_multiplier         = 0.1
        self.guidance_multiplier          = 0.0
        self.escape_multiplier            = 3.0
        self.cohesion_threat_multiplier   = -0.7
        self.separation_threat_multiplier = -0.9
        self.alignment_threat_multiplier  = 0.4
        self.guidance_threat_multiplier   = 0.0
        self.wind_x                       = 0.0
        self.wind_y                       = 0.0
        self.straggler_distance           = 150.0
        self.fail_on_stragglers           = False

        # [HERDER]
        self.herder_speed_multiplier        = 4.0
        self.herder_max_speed               = 1.3
        self.herder_max_turn_degrees        = 15.0
        self.herder_max_turn_per_tick       = 30.0
        self.steering_mode                  = 'position'
        self.closest_approach               = 57.0
        self.fence_clearance                = 6.0

        # [SENSORS]
        self.sheep_sensor_depth              = 140.0
        self.sheep_sensor_angle              = 5.703125
        self.sheep_sensor_output_is_distance = False
        self.binary_sheep_sensor             = False
        self.wall_sensor_depth               = 10.0
        self.wall_sensor_sample_points       = 8
        self.zero_relative_angles            = True

        # [NETWORK]
        self.hidden_layers = [5, 10]
        self.activations   = [ActivationKind.TANH, ActivationKind.TANH,
                              ActivationKind.TANH, ActivationKind.IDENTITY]

        # [INPUTS]
        self.input_angle_of_herder            = False
        self.input_sheep_sensor               = True
        self.input_wall_sensor                = False
        self.input_distance_to_centroid       = False
        self.input_angle_to_centroid          = False
        self.input_relative_centroid_offset   = False
        self.input_absolute_herder_position   = False
        self.input_flock_movement_angle       = False
        self.input_absolute_centroid_position = False
        self.input_angle_to_next_waypoint     = True
        self.input_closest_approach           = False

        # [TRAINING]
        self.initial_moves_before_mutation = 300
        self.move_budget_growth_percent    = 5.0
        self.time_wasting_limit            = 1500.0
        self.time_wasting_units            = 'ticks'
        self.mutation_chance_percent       = 5.0
        self.mutation_magnitude            = 0.25
        self.max_mutation_passes           = 100
        self.loaded_moves_before_mutation  = 3000
        self.max_number_generations        = None
        self.model_directory               = None
        self.save_models                   = False

        # [WORLD]
        self.world_width  = 300
        self.world_height = 300

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, every parameter takes its default value.
                         Keys missing from the file also take their default value.
        """
        self._set_defaults()

        if config_file is None:
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION]

        # The number of herders (and networks) trained side by side.
        # Must be even, so the population splits into two halves for
        # selection; a population of 1 is re-randomized every generation.
        self.population_size = get_value('POPULATION', 'population_size', int, self.population_size)

        # [FOLLOWER]

        # The number of followers (sheep) in each flock.
        self.flock_size = get_value('FOLLOWER', 'flock_size', int, self.flock_size)

        # The distance at which a follower first notices the herder; the
        # "threatened" multipliers fade in around this distance.
        self.notice_distance = get_value('FOLLOWER', 'notice_distance', float, self.notice_distance)

        # Speeds below the minimum are zeroed, speeds above the maximum are capped.
        self.follower_min_speed = get_value('FOLLOWER', 'min_speed', float, self.follower_min_speed)
        self.follower_max_speed = get_value('FOLLOWER', 'max_speed', float, self.follower_max_speed)

        # Followers within this radius of each other align their velocities.
        self.mass_radius = get_value('FOLLOWER', 'mass_radius', float, self.mass_radius)

        # Weights of the steering rules. Each (except escape) is scaled by
        # (1 + proximity * threat_multiplier), where proximity goes from 0
        # (herder far away) to 1 (herder close).
        self.cohesion_multiplier          = get_value('FOLLOWER', 'cohesion_multiplier'         , float, self.cohesion_multiplier)
        self.separation_multiplier        = get_value('FOLLOWER', 'separation_multiplier'       , float, self.separation_multiplier)
        self.alignment_multiplier         = get_value('FOLLOWER', 'alignment_multiplier'        , float, self.alignment_multiplier)
        self.guidance_multiplier          = get_value('FOLLOWER', 'guidance_multiplier'         , float, self.guidance_multiplier)
        self.escape_multiplier            = get_value('FOLLOWER', 'escape_multiplier'           , float, self.escape_multiplier)
        self.cohesion_threat_multiplier   = get_value('FOLLOWER', 'cohesion_threat_multiplier'  , float, self.cohesion_threat_multiplier)
        self.separation_threat_multiplier = get_value('FOLLOWER', 'separation_threat_multiplier', float, self.separation_threat_multiplier)
        self.alignment_threat_multiplier  = get_value('FOLLOWER', 'alignment_threat_multiplier' , float, self.alignment_threat_multiplier)
        self.guidance_threat_multiplier   = get_value('FOLLOWER', 'guidance_threat_multiplier'  , float, self.guidance_threat_multiplier)

        # A constant drift (wind, river flow) added to every follower's velocity.
        self.wind_x = get_value('FOLLOWER', 'wind_x', float, self.wind_x)
        self.wind_y = get_value('FOLLOWER', 'wind_y', float, self.wind_y)

        # Followers farther than this from the centroid are stragglers;
        # optionally a flock with stragglers fails.
        self.straggler_distance = get_value('FOLLOWER', 'straggler_distance', float, self.straggler_distance)
        self.fail_on_stragglers = get_value('FOLLOWER', 'fail_on_stragglers', bool , self.fail_on_stragglers)

        # [HERDER]

        # Heading steering: the speed output is multiplied by this factor.
        self.herder_speed_multiplier = get_value('HERDER', 'speed_multiplier', float, self.herder_speed_multiplier)

        # The speed of the herder is capped to +/- this value.
        self.herder_max_speed = get_value('HERDER', 'max_speed', float, self.herder_max_speed)

        # Heading steering: largest heading change per tick, in degrees.
        self.herder_max_turn_degrees = get_value('HERDER', 'max_turn_degrees', float, self.herder_max_turn_degrees)

        # Position steering: largest heading change per tick, in degrees.
        self.herder_max_turn_per_tick = get_value('HERDER', 'max_turn_per_tick_degrees', float, self.herder_max_turn_per_tick)

        # How the network outputs steer the herder.
        # Allowed values:
        #   "position" - outputs are an offset from the flock centroid to move towards
        #   "heading"  - outputs are a heading change and a speed
        self.steering_mode = get_value('HERDER', 'steering_mode', str, self.steering_mode)

        # Closest distance the herder is meant to approach the flock (an optional input).
        self.closest_approach = get_value('HERDER', 'closest_approach', float, self.closest_approach)

        # The herder is pushed back when closer than this to a fence.
        self.fence_clearance = get_value('HERDER', 'fence_clearance', float, self.fence_clearance)

        # [SENSORS]

        # Reach and sector width (degrees) of the sheep sensor.
        self.sheep_sensor_depth = get_value('SENSORS', 'sheep_sensor_depth', float, self.sheep_sensor_depth)
        self.sheep_sensor_angle = get_value('SENSORS', 'sheep_sensor_angle', float, self.sheep_sensor_angle)

        # Sheep sensor output: nearest distance (True) or share of the flock (False).
        self.sheep_sensor_output_is_distance = \
            get_value('SENSORS', 'sheep_sensor_output_is_distance', bool, self.sheep_sensor_output_is_distance)

        # Collapse every non-empty sheep sensor sector to 1.
        self.binary_sheep_sensor = get_value('SENSORS', 'binary_sheep_sensor', bool, self.binary_sheep_sensor)

        # Reach and number of 45 degree sectors of the wall sensor.
        self.wall_sensor_depth         = get_value('SENSORS', 'wall_sensor_depth'        , float, self.wall_sensor_depth)
        self.wall_sensor_sample_points = get_value('SENSORS', 'wall_sensor_sample_points', int  , self.wall_sensor_sample_points)

        # If True, sensors are anchored at angle 0 rather than at the herder's heading.
        self.zero_relative_angles = get_value('SENSORS', 'zero_relative_angles', bool, self.zero_relative_angles)

        # [NETWORK]

        # Widths of the hidden layers. A width of 0 means "as wide as the input layer".
        self.hidden_layers = self._parse_int_list(get_value('NETWORK', 'hidden_layers', str, self.hidden_layers))

        # One activation per layer: input, hidden layers..., output.
        # The input layer's entry is kept for symmetry but never applied.
        self.activations = self._parse_activations(get_value('NETWORK', 'activations', str, self.activations))

        # [INPUTS]

        # Which terms the network receives (see INPUT_TOGGLES for their order).
        for attribute in INPUT_TOGGLES:
            key = attribute[len('input_'):]
            setattr(self, attribute, get_value('INPUTS', key, bool, getattr(self, attribute)))

        # [TRAINING]

        # Moves before the first generation transition, and the percentage
        # by which that budget grows at every transition.
        self.initial_moves_before_mutation = \
            get_value('TRAINING', 'initial_moves_before_mutation', int, self.initial_moves_before_mutation)
        self.move_budget_growth_percent = \
            get_value('TRAINING', 'move_budget_growth_percent', float, self.move_budget_growth_percent)

        # A flock fails when it makes no waypoint progress for this long.
        # Allowed units: "ticks" (moves) or "seconds" (wall-clock time).
        self.time_wasting_limit = get_value('TRAINING', 'time_wasting_limit', float, self.time_wasting_limit)
        self.time_wasting_units = get_value('TRAINING', 'time_wasting_units', str  , self.time_wasting_units)

        # Chance (percent) and magnitude of the perturbation applied to cloned networks.
        self.mutation_chance_percent = get_value('TRAINING', 'mutation_chance_percent', float, self.mutation_chance_percent)
        self.mutation_magnitude      = get_value('TRAINING', 'mutation_magnitude'     , float, self.mutation_magnitude)

        # Mutation passes that may change nothing before one change is forced.
        self.max_mutation_passes = get_value('TRAINING', 'max_mutation_passes', int, self.max_mutation_passes)

        # Move budget used when previously trained models were loaded.
        self.loaded_moves_before_mutation = \
            get_value('TRAINING', 'loaded_moves_before_mutation', int, self.loaded_moves_before_mutation)

        # Stop after this many generations ("None" = train until stopped).
        self.max_number_generations = get_value('TRAINING', 'max_number_generations', int, self.max_number_generations)

        # Directory holding one 'herder<id>.ai' model file per network, and
        # whether to save the models there after every generation.
        self.model_directory = get_value('TRAINING', 'model_directory', str , self.model_directory)
        self.save_models     = get_value('TRAINING', 'save_models'    , bool, self.save_models)

        # [WORLD]

        # Size of the playing field, in pixels.
        self.world_width  = get_value('WORLD', 'width' , int, self.world_width)
        self.world_height = get_value('WORLD', 'height', int, self.world_height)

    def __setattr__(self, name, value):
        """
        Override 'setattr' so list-valued parameters can be assigned as strings,
        e.g. config.hidden_layers = "8, 8" or config.activations = "tanh, relu, tanh, identity".
        """
        if name == 'hidden_layers':
            value = self._parse_int_list(value)
        elif name == 'activations':
            value = self._parse_activations(value)
        super().__setattr__(name, value)

    @property
    def time_wasting_in_seconds(self) -> bool:
        return self.time_wasting_units == 'seconds'

    def validate(self):
        """
        Check that the parameters describe a runnable training session.

        Raises:
            ValueError: describing the first problem found
        """
        if self.population_size < 1 or (self.population_size > 1 and self.population_size % 2):
            raise ValueError(f"population_size must be 1 or a positive even number, got {self.population_size}")
        if self.flock_size < 1:
            raise ValueError(f"flock_size must be positive, got {self.flock_size}")
        if any(width < 0 for width in self.hidden_layers):
            raise ValueError(f"hidden_layers cannot contain negative widths, got {self.hidden_layers}")
        if len(self.activations) != len(self.hidden_layers) + 2:
            raise ValueError(f"Expected {len(self.hidden_layers) + 2} activations "
                             f"(input, {len(self.hidden_layers)} hidden, output), got {len(self.activations)}")
        if self.steering_mode not in STEERING_MODES:
            raise ValueError(f"steering_mode must be one of {STEERING_MODES}, got '{self.steering_mode}'")
        if self.time_wasting_units not in CLOCK_UNITS:
            raise ValueError(f"time_wasting_units must be one of {CLOCK_UNITS}, got '{self.time_wasting_units}'")
        if not any(getattr(self, attribute) for attribute in INPUT_TOGGLES):
            raise ValueError("At least one network input must be enabled in [INPUTS]")
        if self.sheep_sensor_angle <= 0 or self.sheep_sensor_angle > 360:
            raise ValueError(f"sheep_sensor_angle must be in (0, 360], got {self.sheep_sensor_angle}")
        if self.mutation_magnitude <= 0:
            raise ValueError(f"mutation_magnitude must be positive, got {self.mutation_magnitude}")

    def save(self, path: str):
        """Write the configuration to an INI file that 'Config(path)' reads back."""
        parser = configparser.ConfigParser()

        def fmt(value):
            if value is None:
                return 'None'
            if isinstance(value, list):
                return ', '.join(v.value if isinstance(v, ActivationKind) else str(v) for v in value)
            return str(value)

        parser['POPULATION'] = {'population_size': fmt(self.population_size)}
        parser['FOLLOWER'] = {
            'flock_size'                  : fmt(self.flock_size),
            'notice_distance'             : fmt(self.notice_distance),
            'min_speed'                   : fmt(self.follower_min_speed),
            'max_speed'                   : fmt(self.follower_max_speed),
            'mass_radius'                 : fmt(self.mass_radius),
            'cohesion_multiplier'         : fmt(self.cohesion_multiplier),
            'separation_multiplier'       : fmt(self.separation_multiplier),
            'alignment_multiplier'        : fmt(self.alignment_multiplier),
            'guidance_multiplier'         : fmt(self.guidance_multiplier),
            'escape_multiplier'           : fmt(self.escape_multiplier),
            'cohesion_threat_multiplier'  : fmt(self.cohesion_threat_multiplier),
            'separation_threat_multiplier': fmt(self.separation_threat_multiplier),
            'alignment_threat_multiplier' : fmt(self.alignment_threat_multiplier),
            'guidance_threat_multiplier'  : fmt(self.guidance_threat_multiplier),
            'wind_x'                      : fmt(self.wind_x),
            'wind_y'                      : fmt(self.wind_y),
            'straggler_distance'          : fmt(self.straggler_distance),
            'fail_on_stragglers'          : fmt(self.fail_on_stragglers)}
        parser['HERDER'] = {
            'speed_multiplier'         : fmt(self.herder_speed_multiplier),
            'max_speed'                : fmt(self.herder_max_speed),
            'max_turn_degrees'         : fmt(self.herder_max_turn_degrees),
            'max_turn_per_tick_degrees': fmt(self.herder_max_turn_per_tick),
            'steering_mode'            : fmt(self.steering_mode),
            'closest_approach'         : fmt(self.closest_approach),
            'fence_clearance'          : fmt(self.fence_clearance)}
        parser['SENSORS'] = {
            'sheep_sensor_depth'             : fmt(self.sheep_sensor_depth),
            'sheep_sensor_angle'             : fmt(self.sheep_sensor_angle),
            'sheep_sensor_output_is_distance': fmt(self.sheep_sensor_output_is_distance),
            'binary_sheep_sensor'            : fmt(self.binary_sheep_sensor),
            'wall_sensor_depth'              : fmt(self.wall_sensor_depth),
            'wall_sensor_sample_points'      : fmt(self.wall_sensor_sample_points),
            'zero_relative_angles'           : fmt(self.zero_relative_angles)}
        parser['NETWORK'] = {
            'hidden_layers': fmt(self.hidden_layers),
            'activations'  : fmt(self.activations)}
        parser['INPUTS'] = {attribute[len('input_'):]: fmt(getattr(self, attribute))
                            for attribute in INPUT_TOGGLES}
        parser['TRAINING'] = {
            'initial_moves_before_mutation': fmt(self.initial_moves_before_mutation),
            'move_budget_growth_percent'   : fmt(self.move_budget_growth_percent),
            'time_wasting_limit'           : fmt(self.time_wasting_limit),
            'time_wasting_units'           : fmt(self.time_wasting_units),
            'mutation_chance_percent'      : fmt(self.mutation_chance_percent),
            'mutation_magnitude'           : fmt(self.mutation_magnitude),
            'max_mutation_passes'          : fmt(self.max_mutation_passes),
            'loaded_moves_before_mutation' : fmt(self.loaded_moves_before_mutation),
            'max_number_generations'       : fmt(self.max_number_generations),
            'model_directory'              : fmt(self.model_directory),
            'save_models'                  : fmt(self.save_models)}
        parser['WORLD'] = {
            'width' : fmt(self.world_width),
            'height': fmt(self.world_height)}

        with open(path, 'w') as f:
            parser.write(f)
