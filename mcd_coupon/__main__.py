from mcd_coupon.cli import main

main()
