from .prices import (
    price_per_token_to_per_lamport,
    price_per_lamport_to_price_per_token,
    q64x64_price_to_decimal,
    to_wei_amount,
    ui_amount_to_wei,
)
from .bins import (
    Rounding,
    get_base,
    get_price_from_id,
    get_precise_id_from_price,
    get_id_from_price,
    get_ui_price_from_id,
    get_active_id_from_ui_price,
    convert_min_max_ui_price_to_min_max_bin_id,
)
from .fees import (
    compute_base_factor_from_fee_bps,
    fee_bps_from_base_factor,
    get_base_fee_rate,
    fee_rate_to_fee_pct,
    percent_to_bps,
)
from .distribution import (
    BinAmount,
    generate_amount_for_bins,
    get_number_of_position_required_to_cover_range,
    get_position_bin_ranges,
    print_distribution,
)
from .compression import CompressionResult, compress_bin_amount, decompress_bin_amount
