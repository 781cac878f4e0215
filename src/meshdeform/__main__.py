from meshdeform.sim import main

main()
